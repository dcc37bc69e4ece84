"""Bastion reconciliation CLI commands.

This module provides commands for:
- Reconciling (creating/updating) Bastion hosts and their public IPs
- Deleting Bastion hosts
- Showing the resolved scope and desired Bastion hosts
"""

import logging
import sys

import click
from rich.console import Console
from rich.table import Table

from azbastion.clients import ClientFactoryError, create_clients
from azbastion.config_manager import ConfigError, ConfigManager, ReconcileConfig
from azbastion.modules.bastion_hosts import BastionHostError, BastionHostService
from azbastion.scope import ClusterScope, ScopeError

logger = logging.getLogger(__name__)


def _load_config(ctx: click.Context) -> ReconcileConfig:
    options = ctx.obj or {}
    return ConfigManager.resolve(options.get("config"), **options.get("overrides", {}))


def _build_service(config: ReconcileConfig) -> tuple[ClusterScope, BastionHostService]:
    scope = ClusterScope.from_config(config)
    clients = create_clients(
        backend=config.backend,
        subscription_id=config.subscription_id,
        command_timeout=config.command_timeout,
        provisioning_timeout=config.provisioning_timeout,
    )
    service = BastionHostService(scope, clients.bastion_hosts, clients.subnets, clients.public_ips)
    return scope, service


@click.command(name="reconcile")
@click.pass_context
def reconcile_command(ctx: click.Context):
    """Create or update Bastion hosts.

    Resolves each Bastion's subnet, creates its public IP if missing,
    then creates or updates the Bastion host.

    \b
    Examples:
      $ azbastion reconcile
      $ azbastion --rg my-rg --cluster-name dev reconcile
    """
    try:
        config = _load_config(ctx)
        scope, service = _build_service(config)

        specs = scope.bastion_specs()
        if not specs:
            click.echo("No Bastion hosts configured")
            return

        click.echo(f"Reconciling {len(specs)} Bastion host(s) in {scope.resource_group()}...")
        service.reconcile()
        click.echo(f"✓ Reconciled: {', '.join(spec.name for spec in specs)}")

    except (ConfigError, ScopeError, ClientFactoryError, BastionHostError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Failed to reconcile Bastion hosts")
        sys.exit(1)


@click.command(name="delete")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_command(ctx: click.Context, yes: bool):
    """Delete Bastion hosts.

    Hosts that are already gone are treated as deleted.

    \b
    Examples:
      $ azbastion delete
      $ azbastion delete --yes
    """
    try:
        config = _load_config(ctx)
        scope, service = _build_service(config)

        specs = scope.bastion_specs()
        if not specs:
            click.echo("No Bastion hosts configured")
            return

        names = ", ".join(spec.name for spec in specs)
        if not yes and not click.confirm(
            f"Delete Bastion host(s) {names} in {scope.resource_group()}?", default=False
        ):
            click.echo("Cancelled")
            return

        service.delete()
        click.echo(f"✓ Deleted: {names}")

    except (ConfigError, ScopeError, ClientFactoryError, BastionHostError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Failed to delete Bastion hosts")
        sys.exit(1)


@click.command(name="show")
@click.pass_context
def show_command(ctx: click.Context):
    """Show the resolved scope and desired Bastion hosts.

    Makes no Azure calls.
    """
    console = Console()
    try:
        config = _load_config(ctx)
        scope = ClusterScope.from_config(config)
    except (ConfigError, ScopeError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    console.print(f"Resource Group: {scope.resource_group()}")
    console.print(f"Location: {scope.location()}")
    console.print(f"Cluster: {scope.cluster_name()}")
    console.print(f"Backend: {config.backend}")

    table = Table(title="Bastion Hosts")
    table.add_column("Name", style="cyan")
    table.add_column("VNet")
    table.add_column("Subnet")
    table.add_column("Public IP")
    for spec in scope.bastion_specs():
        table.add_row(spec.name, spec.vnet_name, spec.subnet_name, spec.public_ip_name)
    console.print(table)


__all__ = ["delete_command", "reconcile_command", "show_command"]
