"""Azure CLI backed clients.

Security:
- No shell=True for subprocess
- Timeout enforcement on all operations
- Error message sanitization (raw stderr kept on the exception only)

Note: Delegates ALL Azure operations to Azure CLI. The Bastion upsert goes
through `az rest` so the full ARM body (IP configuration name, DNS name,
tags) is sent as-is, then polls the provisioning state until it settles.
"""

import json
import logging
import subprocess
import time
from typing import Any

from azbastion.azure_errors import AzureCLIError, sanitize_azure_error
from azbastion.models import BastionHostSpec, PublicIPAddress, PublicIPSpec, Subnet

logger = logging.getLogger(__name__)

ARM_ENDPOINT = "https://management.azure.com"
BASTION_API_VERSION = "2023-09-01"
TERMINAL_PROVISIONING_STATES = {"Succeeded", "Failed", "Canceled"}


class AzureCLIClient:
    """Base class running az commands."""

    DEFAULT_COMMAND_TIMEOUT = 60  # 1 minute for most commands

    def __init__(self, timeout: int = DEFAULT_COMMAND_TIMEOUT):
        self.timeout = timeout

    def _run(self, args: list[str], timeout: int | None = None) -> str:
        """Run an az command and return its stdout.

        Args:
            args: Arguments after "az"
            timeout: Override for the client timeout

        Returns:
            Command stdout

        Raises:
            AzureCLIError: If the command fails or times out
        """
        cmd = ["az", *args]
        logger.debug(f"Running: az {' '.join(args[:3])}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout or self.timeout,
                check=True,
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            stderr = e.stderr or ""
            raise AzureCLIError(sanitize_azure_error(stderr), stderr, e.returncode) from e
        except subprocess.TimeoutExpired as e:
            raise AzureCLIError("Operation timed out") from e
        except FileNotFoundError as e:
            raise AzureCLIError("Azure CLI (az) not found. Install it and run 'az login'.") from e

    def _run_json(self, args: list[str], timeout: int | None = None) -> dict[str, Any]:
        output = self._run([*args, "--output", "json"], timeout)
        try:
            return json.loads(output) if output.strip() else {}
        except json.JSONDecodeError as e:
            raise AzureCLIError("Failed to parse Azure CLI response") from e


class CLISubnetsClient(AzureCLIClient):
    """Subnet lookup through `az network vnet subnet`."""

    def get(self, resource_group: str, vnet_name: str, subnet_name: str) -> Subnet:
        data = self._run_json(
            [
                "network",
                "vnet",
                "subnet",
                "show",
                "--name",
                subnet_name,
                "--vnet-name",
                vnet_name,
                "--resource-group",
                resource_group,
            ]
        )
        return Subnet(
            id=data["id"],
            name=data.get("name"),
            address_prefix=data.get("addressPrefix"),
        )


class CLIPublicIPsClient(AzureCLIClient):
    """Public IP lookup and creation through `az network public-ip`."""

    def get(self, resource_group: str, name: str) -> PublicIPAddress:
        data = self._run_json(
            [
                "network",
                "public-ip",
                "show",
                "--name",
                name,
                "--resource-group",
                resource_group,
            ]
        )
        return PublicIPAddress(
            id=data["id"],
            name=data.get("name"),
            ip_address=data.get("ipAddress"),
            fqdn=(data.get("dnsSettings") or {}).get("fqdn"),
        )

    def create_or_update(self, resource_group: str, name: str, spec: PublicIPSpec) -> None:
        self._run_json(
            [
                "network",
                "public-ip",
                "create",
                "--name",
                name,
                "--resource-group",
                resource_group,
                "--location",
                spec.location,
                "--sku",
                spec.sku,
                "--allocation-method",
                spec.allocation_method,
                "--version",
                spec.version,
                "--dns-name",
                spec.dns_label,
            ]
        )
        logger.debug(f"Public IP created: {name}")


class CLIBastionHostsClient(AzureCLIClient):
    """Bastion host upsert (`az rest`) and deletion (`az network bastion`)."""

    DEFAULT_PROVISIONING_TIMEOUT = 900  # 15 minutes
    DEFAULT_POLL_INTERVAL = 30

    def __init__(
        self,
        subscription_id: str | None = None,
        timeout: int = AzureCLIClient.DEFAULT_COMMAND_TIMEOUT,
        provisioning_timeout: int = DEFAULT_PROVISIONING_TIMEOUT,
        poll_interval: int = DEFAULT_POLL_INTERVAL,
    ):
        super().__init__(timeout)
        self.subscription_id = subscription_id
        self.provisioning_timeout = provisioning_timeout
        self.poll_interval = poll_interval

    def _resource_url(self, resource_group: str, name: str) -> str:
        # az rest substitutes {subscriptionId} with the active subscription
        subscription = self.subscription_id or "{subscriptionId}"
        return (
            f"{ARM_ENDPOINT}/subscriptions/{subscription}/resourceGroups/{resource_group}"
            f"/providers/Microsoft.Network/bastionHosts/{name}"
            f"?api-version={BASTION_API_VERSION}"
        )

    def create_or_update(self, resource_group: str, name: str, spec: BastionHostSpec) -> None:
        self._run(
            [
                "rest",
                "--method",
                "put",
                "--url",
                self._resource_url(resource_group, name),
                "--body",
                json.dumps(spec.to_dict()),
            ],
            timeout=self.provisioning_timeout,
        )
        logger.debug(f"Bastion creation initiated: {name}")
        self.wait_for_provisioning(resource_group, name)

    def wait_for_provisioning(self, resource_group: str, name: str) -> str:
        """Poll the Bastion provisioning state until it reaches a terminal state.

        `az rest` returns as soon as ARM accepts the PUT, so completion is
        observed through `az network bastion show`.

        Returns:
            Final provisioning state ("Succeeded")

        Raises:
            AzureCLIError: If provisioning fails, is canceled or times out
        """
        start_time = time.time()
        logger.debug(f"Polling Bastion provisioning state (timeout: {self.provisioning_timeout}s)")

        while time.time() - start_time < self.provisioning_timeout:
            bastion = self._run_json(
                ["network", "bastion", "show", "--name", name, "--resource-group", resource_group]
            )
            state = bastion.get("provisioningState", "Unknown")
            logger.debug(f"Bastion state: {state}")

            if state in TERMINAL_PROVISIONING_STATES:
                if state == "Succeeded":
                    return state
                raise AzureCLIError(f"Bastion provisioning {state.lower()}: {name}")

            time.sleep(self.poll_interval)

        elapsed = time.time() - start_time
        raise AzureCLIError(f"Bastion provisioning timed out after {elapsed:.0f} seconds: {name}")

    def delete(self, resource_group: str, name: str) -> None:
        self._run(
            [
                "network",
                "bastion",
                "delete",
                "--name",
                name,
                "--resource-group",
                resource_group,
                "--yes",
            ],
            timeout=self.provisioning_timeout,
        )


__all__ = [
    "AzureCLIClient",
    "CLIBastionHostsClient",
    "CLIPublicIPsClient",
    "CLISubnetsClient",
]
