"""Bastion host reconciliation.

Ensures Azure Bastion hosts (and their public IPs) exist, or removes them:
- reconcile(): resolve subnet, get-or-create public IP, upsert Bastion host
- delete(): delete Bastion hosts, tolerating hosts that are already gone

All Azure operations go through the injected clients. The first failure
aborts the batch; errors are wrapped in BastionHostError with the underlying
exception chained as __cause__.
"""

import logging
from typing import Protocol

from azbastion.azure_errors import is_resource_not_found
from azbastion.clients.protocols import BastionHostsClient, PublicIPsClient, SubnetsClient
from azbastion.models import (
    ALLOCATION_STATIC,
    IP_VERSION_IPV4,
    PUBLIC_IP_SKU_STANDARD,
    BastionHostSpec,
    BastionIPConfiguration,
    BastionSpec,
    PublicIPAddress,
    PublicIPSpec,
)
from azbastion.tags import BuildParams, ResourceLifecycle, TagError, build_tags

logger = logging.getLogger(__name__)

BASTION_ROLE = "Bastion"


class BastionHostError(Exception):
    """Raised when a Bastion reconcile or delete step fails."""

    pass


class BastionScope(Protocol):
    """Where and for which cluster the Bastion hosts are reconciled.

    bastion_specs() returns the desired hosts in processing order.
    ClusterScope is the standard implementation.
    """

    def resource_group(self) -> str: ...

    def location(self) -> str: ...

    def cluster_name(self) -> str: ...

    def bastion_specs(self) -> list[BastionSpec]: ...


def ip_configuration_name(bastion_name: str) -> str:
    return f"{bastion_name}-bastionIP"


def bastion_dns_name(bastion_name: str) -> str:
    return f"{bastion_name.lower()}-bastion"


class BastionHostService:
    """Reconcile Bastion hosts for a cluster scope.

    Example:
        >>> clients = create_clients("cli")
        >>> service = BastionHostService(
        ...     scope, clients.bastion_hosts, clients.subnets, clients.public_ips
        ... )
        >>> service.reconcile()
    """

    def __init__(
        self,
        scope: BastionScope,
        client: BastionHostsClient,
        subnets_client: SubnetsClient,
        public_ips_client: PublicIPsClient,
    ):
        self.scope = scope
        self.client = client
        self.subnets_client = subnets_client
        self.public_ips_client = public_ips_client

    def reconcile(self) -> None:
        """Get, create or update every Bastion host in the scope.

        Raises:
            BastionHostError: On the first failing step; remaining specs are skipped
        """
        resource_group = self.scope.resource_group()

        for spec in self.scope.bastion_specs():
            try:
                tags = build_tags(
                    BuildParams(
                        cluster_name=self.scope.cluster_name(),
                        lifecycle=ResourceLifecycle.OWNED,
                        name=spec.name,
                        role=BASTION_ROLE,
                    )
                )
            except TagError as e:
                raise BastionHostError(f"failed to build bastion tags: {e}") from e

            logger.debug(f"Getting subnet {spec.subnet_name} in vnet {spec.vnet_name}")
            try:
                subnet = self.subnets_client.get(resource_group, spec.vnet_name, spec.subnet_name)
            except Exception as e:
                raise BastionHostError(f"failed to get subnet: {e}") from e
            logger.debug(f"Successfully got subnet {spec.subnet_name} in vnet {spec.vnet_name}")

            logger.debug(f"Checking if public IP {spec.public_ip_name} exists, creating if absent")
            public_ip = self._get_or_create_public_ip(resource_group, spec.public_ip_name)
            logger.debug(f"Successfully got public IP {spec.public_ip_name}")

            logger.debug(f"Creating bastion host {spec.name}")
            bastion = BastionHostSpec(
                name=spec.name,
                location=self.scope.location(),
                tags=tags,
                dns_name=bastion_dns_name(spec.name),
                ip_configurations=[
                    BastionIPConfiguration(
                        name=ip_configuration_name(spec.name),
                        subnet_id=subnet.id,
                        public_ip_id=public_ip.id,
                        private_ip_allocation_method=ALLOCATION_STATIC,
                    )
                ],
            )
            try:
                self.client.create_or_update(resource_group, spec.name, bastion)
            except Exception as e:
                raise BastionHostError(f"cannot create bastion host: {e}") from e

            logger.debug(f"Successfully created bastion host {spec.name}")

    def _get_or_create_public_ip(self, resource_group: str, public_ip_name: str) -> PublicIPAddress:
        try:
            return self.public_ips_client.get(resource_group, public_ip_name)
        except Exception as e:
            if not is_resource_not_found(e):
                raise BastionHostError(f"failed to get existing publicIP: {e}") from e

        try:
            self._create_bastion_public_ip(public_ip_name)
        except Exception as e:
            raise BastionHostError(f"failed to create bastion publicIP: {e}") from e

        try:
            return self.public_ips_client.get(resource_group, public_ip_name)
        except Exception as e:
            raise BastionHostError(f"failed to get created publicIP: {e}") from e

    def delete(self) -> None:
        """Delete every Bastion host in the scope.

        A host that is already gone ends the whole delete pass successfully;
        specs after it are not processed.

        Raises:
            BastionHostError: If a delete fails for any other reason
        """
        resource_group = self.scope.resource_group()

        for spec in self.scope.bastion_specs():
            logger.debug(f"Deleting bastion host {spec.name}")
            try:
                self.client.delete(resource_group, spec.name)
            except Exception as e:
                if is_resource_not_found(e):
                    # already deleted
                    logger.debug(f"Bastion host {spec.name} already deleted")
                    return
                raise BastionHostError(
                    f"failed to delete Bastion Host {spec.name} "
                    f"in resource group {resource_group}: {e}"
                ) from e

            logger.debug(f"Successfully deleted bastion host {spec.name}")

    def _create_bastion_public_ip(self, ip_name: str) -> None:
        logger.debug(f"Creating bastion public IP {ip_name}")
        self.public_ips_client.create_or_update(
            self.scope.resource_group(),
            ip_name,
            PublicIPSpec(
                name=ip_name,
                location=self.scope.location(),
                dns_label=ip_name.lower(),
                sku=PUBLIC_IP_SKU_STANDARD,
                version=IP_VERSION_IPV4,
                allocation_method=ALLOCATION_STATIC,
            ),
        )


__all__ = [
    "BASTION_ROLE",
    "BastionHostError",
    "BastionHostService",
    "BastionScope",
    "bastion_dns_name",
    "ip_configuration_name",
]
