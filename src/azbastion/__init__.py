"""azbastion - Azure Bastion host reconciliation

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Security by design (no credentials in code)
- Fail fast with helpful guidance

azbastion ensures Azure Bastion hosts and their public IPs exist for a
cluster, or removes them, delegating all resource manipulation to the Azure
CLI or the Azure SDK.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
