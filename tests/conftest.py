"""
Shared test fixtures and configuration for azbastion tests.

This module provides common fixtures used across all test types:
- Fake network clients sharing one call log
- Cluster scopes with sample Bastion specs
- Sample configuration data
"""

from typing import Any

import pytest

from azbastion.config_manager import BastionEntry
from azbastion.modules.bastion_hosts import BastionHostService
from azbastion.scope import ClusterScope
from tests.mocks.azure_mock import (
    FakeBastionHostsClient,
    FakePublicIPsClient,
    FakeSubnetsClient,
    subnet_id,
)

# ============================================================================
# FAKE CLIENT FIXTURES
# ============================================================================


@pytest.fixture
def calls() -> list:
    """Ordered log of every fake client call."""
    return []


@pytest.fixture
def subnets_client(calls):
    """Subnets client knowing vnet1/snet1 and dev-vnet/AzureBastionSubnet."""
    return FakeSubnetsClient(
        calls,
        subnets={
            ("vnet1", "snet1"): "/subnets/snet1",
            ("dev-vnet", "AzureBastionSubnet"): subnet_id("dev-vnet", "AzureBastionSubnet"),
        },
    )


@pytest.fixture
def public_ips_client(calls):
    """Public IPs client with no existing public IPs."""
    return FakePublicIPsClient(calls)


@pytest.fixture
def bastion_hosts_client(calls):
    """Bastion hosts client with no existing hosts."""
    return FakeBastionHostsClient(calls)


# ============================================================================
# SCOPE / SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def make_scope():
    """Factory for ClusterScope in test-rg/eastus owned by cluster "dev"."""

    def _make(*entries: BastionEntry) -> ClusterScope:
        return ClusterScope("test-rg", "eastus", "dev", list(entries))

    return _make


@pytest.fixture
def make_service(bastion_hosts_client, subnets_client, public_ips_client, make_scope):
    """Factory for BastionHostService wired to the fake clients."""

    def _make(*entries: BastionEntry) -> BastionHostService:
        return BastionHostService(
            make_scope(*entries), bastion_hosts_client, subnets_client, public_ips_client
        )

    return _make


# ============================================================================
# SAMPLE DATA
# ============================================================================


@pytest.fixture
def b1_entry() -> BastionEntry:
    return BastionEntry(name="b1", vnet_name="vnet1", subnet_name="snet1", public_ip_name="pip1")


@pytest.fixture
def sample_config_data() -> dict[str, Any]:
    """Sample configuration data as stored in config.toml."""
    return {
        "subscription_id": "00000000-0000-0000-0000-000000000000",
        "resource_group": "test-rg",
        "location": "eastus",
        "cluster_name": "dev",
        "backend": "cli",
        "bastions": [
            {"name": "dev-bastion"},
            {
                "name": "b1",
                "vnet_name": "vnet1",
                "subnet_name": "snet1",
                "public_ip_name": "pip1",
            },
        ],
    }
