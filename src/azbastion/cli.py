"""azbastion CLI entry point."""

import logging

import click

from azbastion import __version__
from azbastion.clients import BACKENDS
from azbastion.commands import delete_command, reconcile_command, show_command


@click.group()
@click.version_option(version=__version__)
@click.option("--config", type=click.Path(), help="Config file path")
@click.option("--resource-group", "--rg", help="Resource group")
@click.option("--location", help="Azure region")
@click.option("--cluster-name", help="Cluster that owns the Bastion hosts")
@click.option("--subscription-id", help="Azure subscription ID")
@click.option("--backend", type=click.Choice(BACKENDS), help="Azure CLI or Azure SDK")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
def main(
    ctx: click.Context,
    config: str | None,
    resource_group: str | None,
    location: str | None,
    cluster_name: str | None,
    subscription_id: str | None,
    backend: str | None,
    verbose: bool,
):
    """azbastion - Reconcile Azure Bastion hosts.

    \b
    COMMANDS:
        reconcile    Create or update Bastion hosts
        delete       Delete Bastion hosts
        show         Show resolved configuration

    \b
    CONFIGURATION:
        Config file: ~/.azbastion/config.toml
        Keys: resource_group, location, cluster_name, backend, [[bastions]]
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["overrides"] = {
        "resource_group": resource_group,
        "location": location,
        "cluster_name": cluster_name,
        "subscription_id": subscription_id,
        "backend": backend,
    }


main.add_command(reconcile_command)
main.add_command(delete_command)
main.add_command(show_command)


if __name__ == "__main__":
    main()
