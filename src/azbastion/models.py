"""Data models for Bastion reconciliation.

Desired-state descriptors (BastionSpec), resolved cloud entities (Subnet,
PublicIPAddress) and the desired payloads sent to the clients
(PublicIPSpec, BastionHostSpec).

Payload to_dict() methods produce the ARM REST body, so the CLI backend can
PUT them unchanged.
"""

from dataclasses import dataclass, field
from typing import Any

# Public IP configuration
PUBLIC_IP_SKU_STANDARD = "Standard"
IP_VERSION_IPV4 = "IPv4"
ALLOCATION_STATIC = "Static"


@dataclass(frozen=True)
class BastionSpec:
    """Desired Bastion host.

    Names double as the cloud resource keys.
    """

    name: str
    vnet_name: str
    subnet_name: str
    public_ip_name: str


@dataclass
class Subnet:
    """Subnet resolved from Azure. Only the id is consumed."""

    id: str
    name: str | None = None
    address_prefix: str | None = None


@dataclass
class PublicIPAddress:
    """Public IP resolved from Azure. Only the id is consumed."""

    id: str
    name: str | None = None
    ip_address: str | None = None
    fqdn: str | None = None


@dataclass
class PublicIPSpec:
    """Desired public IP for a Bastion host."""

    name: str
    location: str
    dns_label: str
    sku: str = PUBLIC_IP_SKU_STANDARD
    version: str = IP_VERSION_IPV4
    allocation_method: str = ALLOCATION_STATIC

    def to_dict(self) -> dict[str, Any]:
        """Convert to ARM request body."""
        return {
            "name": self.name,
            "location": self.location,
            "sku": {"name": self.sku},
            "properties": {
                "publicIPAddressVersion": self.version,
                "publicIPAllocationMethod": self.allocation_method,
                "dnsSettings": {"domainNameLabel": self.dns_label},
            },
        }


@dataclass
class BastionIPConfiguration:
    """IP configuration binding a Bastion host to its subnet and public IP."""

    name: str
    subnet_id: str
    public_ip_id: str
    private_ip_allocation_method: str = ALLOCATION_STATIC

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "properties": {
                "subnet": {"id": self.subnet_id},
                "publicIPAddress": {"id": self.public_ip_id},
                "privateIPAllocationMethod": self.private_ip_allocation_method,
            },
        }


@dataclass
class BastionHostSpec:
    """Desired Bastion host sent to create-or-update."""

    name: str
    location: str
    dns_name: str
    tags: dict[str, str] = field(default_factory=dict)
    ip_configurations: list[BastionIPConfiguration] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to ARM request body."""
        return {
            "name": self.name,
            "location": self.location,
            "tags": dict(self.tags),
            "properties": {
                "dnsName": self.dns_name,
                "ipConfigurations": [config.to_dict() for config in self.ip_configurations],
            },
        }


__all__ = [
    "ALLOCATION_STATIC",
    "IP_VERSION_IPV4",
    "PUBLIC_IP_SKU_STANDARD",
    "BastionHostSpec",
    "BastionIPConfiguration",
    "BastionSpec",
    "PublicIPAddress",
    "PublicIPSpec",
    "Subnet",
]
