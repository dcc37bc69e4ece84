"""Command groups for azbastion CLI."""

from azbastion.commands.bastion import delete_command, reconcile_command, show_command

__all__ = ["delete_command", "reconcile_command", "show_command"]
