"""Cluster scope for Bastion reconciliation.

The scope answers "where" (resource group, location), "for whom" (cluster
name) and "what" (the ordered Bastion specs) for one reconciliation pass.
"""

import logging
import re

from azbastion.config_manager import BastionEntry, ReconcileConfig
from azbastion.models import BastionSpec
from azbastion.tags import TAG_KEY_PATTERN, cluster_tag_key

logger = logging.getLogger(__name__)

BASTION_SUBNET_NAME = "AzureBastionSubnet"


class ScopeError(Exception):
    """Raised when the scope is incomplete or invalid."""

    pass


class ClusterScope:
    """Scope provider for BastionHostService.

    Example:
        >>> scope = ClusterScope("my-rg", "eastus", "dev", [BastionEntry("dev-bastion")])
        >>> scope.bastion_specs()[0].public_ip_name
        'dev-bastion-pip'
    """

    NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.\-]{1,80}$")
    RESOURCE_GROUP_PATTERN = re.compile(r"^[\w\-\.()]{1,90}$")

    def __init__(
        self,
        resource_group: str,
        location: str,
        cluster_name: str,
        bastions: list[BastionEntry] | None = None,
    ):
        if not resource_group:
            raise ScopeError("Resource group cannot be empty")
        if not location:
            raise ScopeError("Location cannot be empty")
        if not cluster_name:
            raise ScopeError("Cluster name cannot be empty")
        if not self.RESOURCE_GROUP_PATTERN.match(resource_group):
            raise ScopeError(
                f"Invalid resource group name: {resource_group}. "
                "Must be 1-90 characters, alphanumeric, hyphens, dots, or parentheses."
            )
        if not TAG_KEY_PATTERN.match(cluster_tag_key(cluster_name)):
            raise ScopeError(
                f"Invalid cluster name: {cluster_name}. "
                "Cannot contain < > % & \\ ? or / characters."
            )

        self._resource_group = resource_group
        self._location = location
        self._cluster_name = cluster_name
        self._specs = [self._to_spec(entry) for entry in bastions or []]

    @classmethod
    def from_config(cls, config: ReconcileConfig) -> "ClusterScope":
        """Build a scope from loaded configuration.

        Raises:
            ScopeError: If required values are missing or invalid
        """
        if not config.resource_group:
            raise ScopeError(
                "Resource group required. Set resource_group in config "
                "or specify with --resource-group option."
            )
        if not config.cluster_name:
            raise ScopeError(
                "Cluster name required. Set cluster_name in config "
                "or specify with --cluster-name option."
            )
        return cls(config.resource_group, config.location, config.cluster_name, config.bastions)

    def _to_spec(self, entry: BastionEntry) -> BastionSpec:
        spec = BastionSpec(
            name=entry.name,
            vnet_name=entry.vnet_name or f"{self._cluster_name}-vnet",
            subnet_name=entry.subnet_name or BASTION_SUBNET_NAME,
            public_ip_name=entry.public_ip_name or f"{entry.name}-pip",
        )
        for label, value in (
            ("Bastion", spec.name),
            ("VNet", spec.vnet_name),
            ("subnet", spec.subnet_name),
            ("public IP", spec.public_ip_name),
        ):
            if not self.NAME_PATTERN.match(value):
                raise ScopeError(
                    f"Invalid {label} name: {value}. "
                    "Must be 1-80 characters, alphanumeric, hyphen, underscore, or period"
                )
        return spec

    def resource_group(self) -> str:
        return self._resource_group

    def location(self) -> str:
        return self._location

    def cluster_name(self) -> str:
        return self._cluster_name

    def bastion_specs(self) -> list[BastionSpec]:
        """Desired Bastion hosts, in configuration order."""
        return list(self._specs)


__all__ = ["BASTION_SUBNET_NAME", "ClusterScope", "ScopeError"]
