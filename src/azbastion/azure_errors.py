"""Azure error classification.

Distinguishes "resource absent" from every other failure, for both the
Azure SDK (azure-core exceptions) and the Azure CLI (stderr text).
"""

import logging

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

logger = logging.getLogger(__name__)

# stderr markers the Azure CLI prints for missing resources
NOT_FOUND_MARKERS = ("ResourceNotFound", "was not found")

# A missing resource group or subscription is a scope error, not an absent resource
SCOPE_NOT_FOUND_CODES = ("ResourceGroupNotFound", "SubscriptionNotFound")


class AzureCLIError(Exception):
    """Raised when an Azure CLI command fails.

    Attributes:
        stderr: Raw stderr from the az command (never shown to users)
        returncode: Process exit code, None on timeout
    """

    def __init__(self, message: str, stderr: str = "", returncode: int | None = None):
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode

    @property
    def not_found(self) -> bool:
        if any(code in self.stderr for code in SCOPE_NOT_FOUND_CODES):
            return False
        return any(marker in self.stderr for marker in NOT_FOUND_MARKERS)


def is_resource_not_found(error: BaseException) -> bool:
    """Check whether an error means the Azure resource does not exist.

    Args:
        error: Exception raised by a client call

    Returns:
        True for ResourceNotFoundError, HTTP 404 responses and CLI
        "not found" failures. A missing resource group or subscription
        is never treated as an absent resource.
    """
    odata_error = getattr(error, "error", None)
    if getattr(odata_error, "code", None) in SCOPE_NOT_FOUND_CODES:
        return False
    if isinstance(error, ResourceNotFoundError):
        return True
    if isinstance(error, HttpResponseError):
        return error.status_code == 404
    if isinstance(error, AzureCLIError):
        return error.not_found
    return False


def sanitize_azure_error(stderr: str) -> str:
    """Sanitize Azure CLI error output to prevent information leakage.

    Args:
        stderr: Raw stderr from Azure CLI

    Returns:
        Sanitized error message safe for user display
    """
    if "ResourceGroupNotFound" in stderr:
        return "Resource group not found"
    if "SubscriptionNotFound" in stderr:
        return "Subscription not found"
    if "ResourceNotFound" in stderr or "was not found" in stderr:
        return "Resource not found"
    if "InvalidAuthenticationToken" in stderr or "AuthenticationFailed" in stderr:
        return "Authentication failed"
    if "AuthorizationFailed" in stderr or "Forbidden" in stderr:
        return "Insufficient permissions"
    if "QuotaExceeded" in stderr or "quota" in stderr.lower():
        return "Quota exceeded"
    if "InUseSubnetCannotBeDeleted" in stderr or "InUse" in stderr:
        return "Resource is in use"
    if "InvalidParameter" in stderr or "invalid" in stderr.lower():
        return "Invalid parameter"
    if "NetworkNotFound" in stderr or "NotFound" in stderr:
        return "Network resource not found"
    if "timeout" in stderr.lower():
        return "Operation timed out"
    # Generic message for unknown errors - log full details for debugging
    logger.debug(f"Azure CLI error details: {stderr}")
    return "Azure operation failed"


__all__ = [
    "AzureCLIError",
    "is_resource_not_found",
    "sanitize_azure_error",
]
