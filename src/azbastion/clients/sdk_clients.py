"""Azure SDK backed clients.

Uses azure-mgmt-network for all network operations. SDK exceptions are not
wrapped so that azbastion.azure_errors.is_resource_not_found() can classify
ResourceNotFoundError and 404 responses.

Authentication uses DefaultAzureCredential unless a credential is given.
"""

import logging
from typing import Any

from azure.identity import DefaultAzureCredential
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.network.models import BastionHost, BastionHostIPConfiguration, SubResource
from azure.mgmt.network.models import PublicIPAddress as SdkPublicIPAddress
from azure.mgmt.network.models import PublicIPAddressDnsSettings, PublicIPAddressSku

from azbastion.models import BastionHostSpec, PublicIPAddress, PublicIPSpec, Subnet

logger = logging.getLogger(__name__)

DEFAULT_PROVISIONING_TIMEOUT = 900  # 15 minutes


class SDKClientError(Exception):
    """Raised when the SDK network client cannot be created."""

    pass


def create_network_client(subscription_id: str, credential: Any = None) -> NetworkManagementClient:
    """Create a NetworkManagementClient.

    Args:
        subscription_id: Azure subscription ID
        credential: TokenCredential (DefaultAzureCredential if None)

    Returns:
        NetworkManagementClient

    Raises:
        SDKClientError: If subscription ID is empty
    """
    if not subscription_id or not subscription_id.strip():
        raise SDKClientError("Subscription ID is required for the SDK backend")
    return NetworkManagementClient(credential or DefaultAzureCredential(), subscription_id)


class SDKSubnetsClient:
    def __init__(self, network_client: NetworkManagementClient):
        self._client = network_client

    def get(self, resource_group: str, vnet_name: str, subnet_name: str) -> Subnet:
        subnet = self._client.subnets.get(resource_group, vnet_name, subnet_name)
        return Subnet(id=subnet.id, name=subnet.name, address_prefix=subnet.address_prefix)


class SDKPublicIPsClient:
    def __init__(
        self,
        network_client: NetworkManagementClient,
        timeout: int = DEFAULT_PROVISIONING_TIMEOUT,
    ):
        self._client = network_client
        self.timeout = timeout

    def get(self, resource_group: str, name: str) -> PublicIPAddress:
        public_ip = self._client.public_ip_addresses.get(resource_group, name)
        dns_settings = public_ip.dns_settings
        return PublicIPAddress(
            id=public_ip.id,
            name=public_ip.name,
            ip_address=public_ip.ip_address,
            fqdn=dns_settings.fqdn if dns_settings else None,
        )

    def create_or_update(self, resource_group: str, name: str, spec: PublicIPSpec) -> None:
        parameters = SdkPublicIPAddress(
            location=spec.location,
            sku=PublicIPAddressSku(name=spec.sku),
            public_ip_address_version=spec.version,
            public_ip_allocation_method=spec.allocation_method,
            dns_settings=PublicIPAddressDnsSettings(domain_name_label=spec.dns_label),
        )
        poller = self._client.public_ip_addresses.begin_create_or_update(
            resource_group, name, parameters
        )
        poller.result(timeout=self.timeout)
        logger.debug(f"Public IP created: {name}")


class SDKBastionHostsClient:
    def __init__(
        self,
        network_client: NetworkManagementClient,
        timeout: int = DEFAULT_PROVISIONING_TIMEOUT,
    ):
        self._client = network_client
        self.timeout = timeout

    @staticmethod
    def to_sdk_model(spec: BastionHostSpec) -> BastionHost:
        """Convert a BastionHostSpec to the SDK BastionHost model."""
        return BastionHost(
            location=spec.location,
            tags=dict(spec.tags),
            dns_name=spec.dns_name,
            ip_configurations=[
                BastionHostIPConfiguration(
                    name=config.name,
                    subnet=SubResource(id=config.subnet_id),
                    public_ip_address=SubResource(id=config.public_ip_id),
                    private_ip_allocation_method=config.private_ip_allocation_method,
                )
                for config in spec.ip_configurations
            ],
        )

    def create_or_update(self, resource_group: str, name: str, spec: BastionHostSpec) -> None:
        poller = self._client.bastion_hosts.begin_create_or_update(
            resource_group, name, self.to_sdk_model(spec)
        )
        poller.result(timeout=self.timeout)

    def delete(self, resource_group: str, name: str) -> None:
        poller = self._client.bastion_hosts.begin_delete(resource_group, name)
        poller.result(timeout=self.timeout)


__all__ = [
    "SDKBastionHostsClient",
    "SDKClientError",
    "SDKPublicIPsClient",
    "SDKSubnetsClient",
    "create_network_client",
]
