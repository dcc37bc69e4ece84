"""Capability protocols for the clients the Bastion workflows consume.

Any object with these methods can be injected into BastionHostService:
the Azure CLI backend, the Azure SDK backend, or a test fake.
"""

from typing import Protocol, runtime_checkable

from azbastion.models import BastionHostSpec, PublicIPAddress, PublicIPSpec, Subnet


@runtime_checkable
class SubnetsClient(Protocol):
    """Read-only subnet lookup."""

    def get(self, resource_group: str, vnet_name: str, subnet_name: str) -> Subnet:
        """Get a subnet.

        Raises:
            Exception: Any client error; absence must satisfy
                is_resource_not_found()
        """
        ...


@runtime_checkable
class PublicIPsClient(Protocol):
    """Public IP lookup and creation."""

    def get(self, resource_group: str, name: str) -> PublicIPAddress:
        """Get a public IP by name."""
        ...

    def create_or_update(self, resource_group: str, name: str, spec: PublicIPSpec) -> None:
        """Create or update a public IP and wait for completion."""
        ...


@runtime_checkable
class BastionHostsClient(Protocol):
    """Bastion host upsert and deletion."""

    def create_or_update(self, resource_group: str, name: str, spec: BastionHostSpec) -> None:
        """Create or update a Bastion host."""
        ...

    def delete(self, resource_group: str, name: str) -> None:
        """Delete a Bastion host."""
        ...


__all__ = ["BastionHostsClient", "PublicIPsClient", "SubnetsClient"]
