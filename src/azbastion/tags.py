"""Ownership tags for Bastion resources.

Tags mark a resource as owned (or shared) by a cluster so it can be
attributed and garbage-collected.

Security:
- Tag keys validated against Azure tag key rules
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

TAG_PREFIX = "azbastion"
TAG_ROLE = f"{TAG_PREFIX}_role"
TAG_NAME = "Name"

# Azure tag keys cannot contain < > % & \ ? /
TAG_KEY_PATTERN = re.compile(r"^[^<>%&\\?/]{1,512}$")


class TagError(Exception):
    """Raised when tags cannot be built."""

    pass


class ResourceLifecycle(str, Enum):
    """Lifecycle of a tagged resource relative to its cluster."""

    OWNED = "owned"
    SHARED = "shared"


@dataclass
class BuildParams:
    """Inputs for build_tags."""

    cluster_name: str
    lifecycle: ResourceLifecycle
    name: str | None = None
    role: str | None = None
    additional: dict[str, str] = field(default_factory=dict)


def cluster_tag_key(cluster_name: str) -> str:
    """Tag key identifying the owning cluster."""
    return f"{TAG_PREFIX}_cluster_{cluster_name}"


def build_tags(params: BuildParams) -> dict[str, str]:
    """Build the ownership tag mapping for a resource.

    Additional tags are applied first so the ownership keys always win.

    Args:
        params: Cluster, lifecycle, name, role and extra tags

    Returns:
        Dictionary of tag key-value pairs

    Raises:
        TagError: If cluster name is empty or a tag key is invalid

    Example:
        >>> build_tags(BuildParams("dev", ResourceLifecycle.OWNED, name="b1", role="Bastion"))
        {'azbastion_cluster_dev': 'owned', 'azbastion_role': 'Bastion', 'Name': 'b1'}
    """
    if not params.cluster_name:
        raise TagError("Cluster name is required to build ownership tags")

    tags: dict[str, str] = dict(params.additional)
    tags[cluster_tag_key(params.cluster_name)] = ResourceLifecycle(params.lifecycle).value
    if params.role:
        tags[TAG_ROLE] = params.role
    if params.name:
        tags[TAG_NAME] = params.name

    for key in tags:
        if not TAG_KEY_PATTERN.match(key):
            raise TagError(f"Invalid tag key: {key}")

    logger.debug(f"Built tags for {params.name or params.cluster_name}: {tags}")
    return tags


__all__ = [
    "TAG_KEY_PATTERN",
    "TAG_NAME",
    "TAG_PREFIX",
    "TAG_ROLE",
    "BuildParams",
    "ResourceLifecycle",
    "TagError",
    "build_tags",
    "cluster_tag_key",
]
