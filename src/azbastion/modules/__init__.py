"""azbastion modules - Self-contained bricks following the brick philosophy

- Bastion Hosts: Reconcile and delete Bastion hosts and their public IPs
"""

from . import bastion_hosts

__all__ = ["bastion_hosts"]
