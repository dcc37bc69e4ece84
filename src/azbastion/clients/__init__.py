"""Network clients consumed by the Bastion workflows.

Two backends implement the same protocols:
- cli: Azure CLI (default, uses the active `az login` session)
- sdk: azure-mgmt-network with DefaultAzureCredential
"""

import logging
from dataclasses import dataclass

from azbastion.clients.cli_clients import (
    CLIBastionHostsClient,
    CLIPublicIPsClient,
    CLISubnetsClient,
)
from azbastion.clients.protocols import BastionHostsClient, PublicIPsClient, SubnetsClient

logger = logging.getLogger(__name__)

BACKENDS = ("cli", "sdk")


class ClientFactoryError(Exception):
    """Raised when clients cannot be created for a backend."""

    pass


@dataclass
class NetworkClients:
    """The three clients a BastionHostService needs."""

    subnets: SubnetsClient
    public_ips: PublicIPsClient
    bastion_hosts: BastionHostsClient


def create_clients(
    backend: str = "cli",
    subscription_id: str | None = None,
    command_timeout: int = 60,
    provisioning_timeout: int = 900,
) -> NetworkClients:
    """Create network clients for a backend.

    Args:
        backend: "cli" or "sdk"
        subscription_id: Azure subscription ID (required for sdk)
        command_timeout: Timeout for lookups and public IP creation (cli)
        provisioning_timeout: Timeout for long-running operations

    Returns:
        NetworkClients

    Raises:
        ClientFactoryError: If backend is unknown or misconfigured
    """
    logger.debug(f"Creating {backend} network clients")

    if backend == "cli":
        return NetworkClients(
            subnets=CLISubnetsClient(timeout=command_timeout),
            public_ips=CLIPublicIPsClient(timeout=command_timeout),
            bastion_hosts=CLIBastionHostsClient(
                subscription_id=subscription_id,
                timeout=command_timeout,
                provisioning_timeout=provisioning_timeout,
            ),
        )

    if backend == "sdk":
        # Lazy import keeps the cli backend usable without SDK auth setup
        from azbastion.clients.sdk_clients import (
            SDKBastionHostsClient,
            SDKClientError,
            SDKPublicIPsClient,
            SDKSubnetsClient,
            create_network_client,
        )

        try:
            network_client = create_network_client(subscription_id or "")
        except SDKClientError as e:
            raise ClientFactoryError(str(e)) from e
        return NetworkClients(
            subnets=SDKSubnetsClient(network_client),
            public_ips=SDKPublicIPsClient(network_client, timeout=provisioning_timeout),
            bastion_hosts=SDKBastionHostsClient(network_client, timeout=provisioning_timeout),
        )

    raise ClientFactoryError(f"Unknown backend: {backend}. Choose one of: {', '.join(BACKENDS)}")


__all__ = [
    "BACKENDS",
    "ClientFactoryError",
    "NetworkClients",
    "create_clients",
]
