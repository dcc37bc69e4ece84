"""Unit tests for the network client factory."""

from unittest.mock import patch

import pytest

from azbastion.clients import ClientFactoryError, create_clients
from azbastion.clients.cli_clients import (
    CLIBastionHostsClient,
    CLIPublicIPsClient,
    CLISubnetsClient,
)
from azbastion.clients.protocols import BastionHostsClient, PublicIPsClient, SubnetsClient


class TestCreateClients:
    def test_cli_backend(self):
        clients = create_clients("cli", subscription_id="sub-123", command_timeout=30)

        assert isinstance(clients.subnets, CLISubnetsClient)
        assert isinstance(clients.public_ips, CLIPublicIPsClient)
        assert isinstance(clients.bastion_hosts, CLIBastionHostsClient)
        assert clients.subnets.timeout == 30
        assert clients.bastion_hosts.subscription_id == "sub-123"

    def test_cli_clients_satisfy_protocols(self):
        clients = create_clients("cli")

        assert isinstance(clients.subnets, SubnetsClient)
        assert isinstance(clients.public_ips, PublicIPsClient)
        assert isinstance(clients.bastion_hosts, BastionHostsClient)

    @patch("azbastion.clients.sdk_clients.create_network_client")
    def test_sdk_backend(self, mock_create):
        clients = create_clients("sdk", subscription_id="sub-123", provisioning_timeout=300)

        mock_create.assert_called_once_with("sub-123")
        assert clients.bastion_hosts.timeout == 300
        assert isinstance(clients.bastion_hosts, BastionHostsClient)

    def test_sdk_backend_requires_subscription(self):
        with pytest.raises(ClientFactoryError, match="Subscription ID is required"):
            create_clients("sdk")

    def test_unknown_backend(self):
        with pytest.raises(ClientFactoryError, match="Unknown backend"):
            create_clients("terraform")
