"""Policy data models.

A policy is read-only once loaded: every model here is frozen and every
collection is a tuple or a read-only mapping.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from bitbucket_enforcer.exceptions import ValidationError

FORK_POLICIES = ("none", "private", "public")
ISSUE_TRACKERS = ("none", "public")


def _frozen_mapping(value: Mapping | None = None) -> Mapping:
    return MappingProxyType(dict(value or {}))


class Permission(str, Enum):
    """Repository permission level."""

    READ = "read"
    WRITE = "write"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: str) -> "Permission":
        """
        Parse a permission string.

        Raises:
            ValidationError: If value is not "read", "write" or "admin"
        """
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                "INVALID_PERMISSION",
                f"Wrong privilege ('{value}'). One of 'read', 'write' or 'admin' required.",
            ) from None


@dataclass(frozen=True)
class DeployKeySpec:
    """A declared deploy key."""

    name: str
    key: str


@dataclass(frozen=True)
class PushRule:
    """Users and groups allowed to push to a branch pattern."""

    users: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()


@dataclass(frozen=True)
class BranchManagement:
    """Branch restrictions to ensure."""

    prevent_delete: tuple[str, ...] = ()
    prevent_rebase: tuple[str, ...] = ()
    allow_pushes: Mapping[str, PushRule] = field(default_factory=_frozen_mapping)


@dataclass(frozen=True)
class AccessManagement:
    """Permission grants to ensure, keyed by user or group name."""

    users: Mapping[str, str] = field(default_factory=_frozen_mapping)
    groups: Mapping[str, str] = field(default_factory=_frozen_mapping)


@dataclass(frozen=True)
class Policy:
    """Desired state for one or more repositories.

    Empty strings and empty collections mean "leave alone". ``private`` is
    tri-state: None leaves visibility untouched, False makes the repository
    public.
    """

    landing_page: str = ""
    private: bool | None = None
    forks: str = ""
    issue_tracker: str = ""
    main_branch: str = ""
    deploy_keys: tuple[DeployKeySpec, ...] = ()
    post_hooks: tuple[str, ...] = ()
    branch_management: BranchManagement = field(default_factory=BranchManagement)
    access_management: AccessManagement = field(default_factory=AccessManagement)
