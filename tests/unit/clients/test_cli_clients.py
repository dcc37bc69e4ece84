"""Unit tests for Azure CLI backed clients.

Tests command construction and error handling with mocked subprocess calls.
"""

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from azbastion.azure_errors import AzureCLIError, is_resource_not_found
from azbastion.clients.cli_clients import (
    CLIBastionHostsClient,
    CLIPublicIPsClient,
    CLISubnetsClient,
)
from azbastion.models import BastionHostSpec, BastionIPConfiguration, PublicIPSpec


def _completed(stdout: str = "") -> MagicMock:
    return MagicMock(returncode=0, stdout=stdout, stderr="")


def _not_found_error(cmd: list[str]) -> subprocess.CalledProcessError:
    return subprocess.CalledProcessError(
        3,
        cmd,
        output="",
        stderr="ERROR: (ResourceNotFound) The Resource was not found.",
    )


class TestCLISubnetsClient:
    """Tests for CLISubnetsClient."""

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_get(self, mock_run):
        mock_run.return_value = _completed(
            json.dumps({"id": "/subnets/snet1", "name": "snet1", "addressPrefix": "10.0.1.0/26"})
        )

        subnet = CLISubnetsClient().get("rg", "vnet1", "snet1")

        assert subnet.id == "/subnets/snet1"
        assert subnet.address_prefix == "10.0.1.0/26"
        cmd = mock_run.call_args[0][0]
        assert cmd[:5] == ["az", "network", "vnet", "subnet", "show"]
        assert cmd[cmd.index("--vnet-name") + 1] == "vnet1"
        assert cmd[cmd.index("--resource-group") + 1] == "rg"
        assert mock_run.call_args[1]["timeout"] == 60
        assert mock_run.call_args[1]["check"] is True

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_get_not_found(self, mock_run):
        mock_run.side_effect = _not_found_error(["az"])

        with pytest.raises(AzureCLIError) as exc_info:
            CLISubnetsClient().get("rg", "vnet1", "snet1")

        assert is_resource_not_found(exc_info.value)
        assert str(exc_info.value) == "Resource not found"
        assert exc_info.value.returncode == 3

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(["az"], 5)

        with pytest.raises(AzureCLIError, match="timed out") as exc_info:
            CLISubnetsClient(timeout=5).get("rg", "vnet1", "snet1")

        assert not is_resource_not_found(exc_info.value)

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_az_not_installed(self, mock_run):
        mock_run.side_effect = FileNotFoundError("az")

        with pytest.raises(AzureCLIError, match="Azure CLI"):
            CLISubnetsClient().get("rg", "vnet1", "snet1")

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_invalid_json(self, mock_run):
        mock_run.return_value = _completed("not json")

        with pytest.raises(AzureCLIError, match="parse"):
            CLISubnetsClient().get("rg", "vnet1", "snet1")


class TestCLIPublicIPsClient:
    """Tests for CLIPublicIPsClient."""

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_get(self, mock_run):
        mock_run.return_value = _completed(
            json.dumps(
                {
                    "id": "/publicIPAddresses/pip1",
                    "name": "pip1",
                    "ipAddress": "20.1.2.3",
                    "dnsSettings": {"fqdn": "pip1.eastus.cloudapp.azure.com"},
                }
            )
        )

        public_ip = CLIPublicIPsClient().get("rg", "pip1")

        assert public_ip.id == "/publicIPAddresses/pip1"
        assert public_ip.ip_address == "20.1.2.3"
        assert public_ip.fqdn == "pip1.eastus.cloudapp.azure.com"

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_create_or_update(self, mock_run):
        mock_run.return_value = _completed("{}")
        spec = PublicIPSpec(name="Pip1", location="eastus", dns_label="pip1")

        CLIPublicIPsClient().create_or_update("rg", "Pip1", spec)

        cmd = mock_run.call_args[0][0]
        assert cmd[:4] == ["az", "network", "public-ip", "create"]
        assert cmd[cmd.index("--sku") + 1] == "Standard"
        assert cmd[cmd.index("--allocation-method") + 1] == "Static"
        assert cmd[cmd.index("--version") + 1] == "IPv4"
        assert cmd[cmd.index("--dns-name") + 1] == "pip1"
        assert cmd[cmd.index("--location") + 1] == "eastus"

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_create_failure_sanitized(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ["az"], output="", stderr="ERROR: (AuthorizationFailed) client 1234 has no access"
        )
        spec = PublicIPSpec(name="pip1", location="eastus", dns_label="pip1")

        with pytest.raises(AzureCLIError) as exc_info:
            CLIPublicIPsClient().create_or_update("rg", "pip1", spec)

        assert str(exc_info.value) == "Insufficient permissions"
        assert "1234" in exc_info.value.stderr


class TestCLIBastionHostsClient:
    """Tests for CLIBastionHostsClient."""

    @pytest.fixture
    def bastion_spec(self):
        return BastionHostSpec(
            name="b1",
            location="eastus",
            dns_name="b1-bastion",
            tags={"Name": "b1"},
            ip_configurations=[
                BastionIPConfiguration(
                    name="b1-bastionIP",
                    subnet_id="/subnets/snet1",
                    public_ip_id="/publicIPAddresses/pip1",
                )
            ],
        )

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_create_or_update_puts_arm_body(self, mock_run, bastion_spec):
        mock_run.return_value = _completed(json.dumps({"provisioningState": "Succeeded"}))

        CLIBastionHostsClient(provisioning_timeout=300).create_or_update("rg", "b1", bastion_spec)

        cmd = mock_run.call_args_list[0][0][0]
        assert cmd[:4] == ["az", "rest", "--method", "put"]
        url = cmd[cmd.index("--url") + 1]
        assert "/subscriptions/{subscriptionId}/resourceGroups/rg/" in url
        assert url.split("?")[0].endswith("/providers/Microsoft.Network/bastionHosts/b1")
        body = json.loads(cmd[cmd.index("--body") + 1])
        assert body["properties"]["dnsName"] == "b1-bastion"
        ip_config = body["properties"]["ipConfigurations"][0]
        assert ip_config["name"] == "b1-bastionIP"
        assert ip_config["properties"]["subnet"] == {"id": "/subnets/snet1"}
        assert ip_config["properties"]["publicIPAddress"] == {"id": "/publicIPAddresses/pip1"}
        assert ip_config["properties"]["privateIPAllocationMethod"] == "Static"
        assert mock_run.call_args_list[0][1]["timeout"] == 300

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_create_or_update_with_subscription(self, mock_run, bastion_spec):
        mock_run.return_value = _completed(json.dumps({"provisioningState": "Succeeded"}))

        CLIBastionHostsClient(subscription_id="sub-123").create_or_update("rg", "b1", bastion_spec)

        cmd = mock_run.call_args_list[0][0][0]
        assert "/subscriptions/sub-123/" in cmd[cmd.index("--url") + 1]

    @patch("azbastion.clients.cli_clients.time.sleep")
    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_create_or_update_waits_for_succeeded(self, mock_run, mock_sleep, bastion_spec):
        mock_run.side_effect = [
            _completed(json.dumps({"provisioningState": "Updating"})),
            _completed(json.dumps({"provisioningState": "Updating"})),
            _completed(json.dumps({"provisioningState": "Updating"})),
            _completed(json.dumps({"provisioningState": "Succeeded"})),
        ]

        CLIBastionHostsClient(poll_interval=10).create_or_update("rg", "b1", bastion_spec)

        assert mock_run.call_count == 4
        show_cmd = mock_run.call_args_list[1][0][0]
        assert show_cmd[:4] == ["az", "network", "bastion", "show"]
        assert show_cmd[show_cmd.index("--name") + 1] == "b1"
        assert show_cmd[show_cmd.index("--resource-group") + 1] == "rg"
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(10)

    @pytest.mark.parametrize("state", ["Failed", "Canceled"])
    @patch("azbastion.clients.cli_clients.time.sleep")
    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_create_or_update_provisioning_failed(self, mock_run, mock_sleep, state, bastion_spec):
        mock_run.side_effect = [
            _completed(json.dumps({"provisioningState": "Updating"})),
            _completed(json.dumps({"provisioningState": state})),
        ]

        with pytest.raises(AzureCLIError, match=f"Bastion provisioning {state.lower()}: b1"):
            CLIBastionHostsClient().create_or_update("rg", "b1", bastion_spec)

        mock_sleep.assert_not_called()

    @patch("azbastion.clients.cli_clients.time.sleep")
    @patch("azbastion.clients.cli_clients.time.time")
    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_create_or_update_provisioning_timeout(
        self, mock_run, mock_time, mock_sleep, bastion_spec
    ):
        mock_run.return_value = _completed(json.dumps({"provisioningState": "Updating"}))
        clock = [0]
        mock_time.side_effect = lambda: clock[0]
        mock_sleep.side_effect = lambda seconds: clock.__setitem__(0, clock[0] + seconds)

        client = CLIBastionHostsClient(provisioning_timeout=100, poll_interval=30)
        with pytest.raises(AzureCLIError, match="timed out after 120 seconds") as exc_info:
            client.create_or_update("rg", "b1", bastion_spec)

        assert not is_resource_not_found(exc_info.value)
        # one PUT, then a show at t=0, 30, 60 and 90
        assert mock_run.call_count == 5
        assert mock_sleep.call_count == 4

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_create_or_update_put_failure_skips_wait(self, mock_run, bastion_spec):
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ["az"], output="", stderr="ERROR: (Conflict) Another operation is in progress"
        )

        with pytest.raises(AzureCLIError):
            CLIBastionHostsClient().create_or_update("rg", "b1", bastion_spec)

        assert mock_run.call_count == 1

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_delete(self, mock_run):
        mock_run.return_value = _completed()

        CLIBastionHostsClient().delete("rg", "b1")

        cmd = mock_run.call_args[0][0]
        assert cmd[:4] == ["az", "network", "bastion", "delete"]
        assert cmd[cmd.index("--name") + 1] == "b1"
        assert "--yes" in cmd

    @patch("azbastion.clients.cli_clients.subprocess.run")
    def test_delete_not_found(self, mock_run):
        mock_run.side_effect = _not_found_error(["az"])

        with pytest.raises(AzureCLIError) as exc_info:
            CLIBastionHostsClient().delete("rg", "b1")

        assert is_resource_not_found(exc_info.value)
