"""
Policy loading.

Policies are JSON documents named ``<config_dir>/<name>.json``. They are
read fresh for every enforcement; nothing is cached.
"""

import json
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from bitbucket_enforcer.exceptions import PolicyError
from bitbucket_enforcer.logging import get_logger
from bitbucket_enforcer.types.policy import (
    FORK_POLICIES,
    ISSUE_TRACKERS,
    AccessManagement,
    BranchManagement,
    DeployKeySpec,
    Policy,
    PushRule,
)

logger = get_logger("policy")


class PolicyLoader:
    """Loads named policies from a directory of JSON files."""

    def __init__(self, config_dir: str | Path, verbose: bool = False) -> None:
        """
        Args:
            config_dir: Directory holding the ``<name>.json`` policy files
            verbose: Log every loaded policy at DEBUG level
        """
        self.config_dir = Path(config_dir)
        self.verbose = verbose

    def path_for(self, name: str) -> Path:
        """
        Resolve the file of a policy.

        Raises:
            PolicyError: If the name is empty or could escape the directory
        """
        if not name:
            raise PolicyError(name, "Empty policy name")
        if "/" in name or "\\" in name or name.startswith("."):
            raise PolicyError(name, f"Invalid policy name '{name}'")
        return self.config_dir / f"{name}.json"

    def load(self, name: str) -> Policy:
        """
        Load and parse a policy.

        Raises:
            PolicyError: If the file is missing, unreadable or malformed
        """
        path = self.path_for(name)
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PolicyError(name, f"Cannot read policy file {path}: {e}") from e

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PolicyError(name, f"Invalid JSON in {path}: {e}") from e

        policy = parse_policy(name, document)

        if self.verbose:
            logger.debug("Loaded policy %s: %s", name, policy)

        return policy


def _expect(name: str, value: Any, kind: type | tuple[type, ...], field_name: str) -> Any:
    if not isinstance(value, kind):
        raise PolicyError(name, f"{field_name} has the wrong type ({type(value).__name__})")
    return value


def _strings(name: str, value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    _expect(name, value, list, field_name)
    for item in value:
        _expect(name, item, str, f"{field_name} entry")
    return tuple(value)


def _grants(name: str, value: Any, field_name: str) -> dict[str, str]:
    """Accept ``{name: level}`` or a list of such objects, merged in order."""
    if value is None:
        return {}
    entries = value if isinstance(value, list) else [value]
    grants: dict[str, str] = {}
    for entry in entries:
        _expect(name, entry, dict, field_name)
        for grantee, level in entry.items():
            grants[grantee] = _expect(name, level, str, f"{field_name}.{grantee}")
    return grants


def parse_policy(name: str, document: Any) -> Policy:
    """
    Build a Policy from a decoded JSON document.

    Permission levels are kept as written; they are validated when granted
    so that one bad grant does not hide the rest of the policy.

    Raises:
        PolicyError: On missing structure or wrongly typed fields
    """
    _expect(name, document, dict, "Policy")

    private = document.get("Private")
    if private is not None:
        _expect(name, private, bool, "Private")

    forks = _expect(name, document.get("Forks") or "", str, "Forks")
    if forks and forks not in FORK_POLICIES:
        raise PolicyError(name, f"Forks must be one of {', '.join(FORK_POLICIES)}, got '{forks}'")

    issue_tracker = _expect(name, document.get("IssueTracker") or "", str, "IssueTracker")
    if issue_tracker and issue_tracker not in ISSUE_TRACKERS:
        raise PolicyError(
            name, f"IssueTracker must be one of {', '.join(ISSUE_TRACKERS)}, got '{issue_tracker}'"
        )

    deploy_keys = []
    for entry in _expect(name, document.get("DeployKeys") or [], list, "DeployKeys"):
        _expect(name, entry, dict, "DeployKeys entry")
        deploy_keys.append(
            DeployKeySpec(
                name=_expect(name, entry.get("Name", ""), str, "DeployKeys.Name"),
                key=_expect(name, entry.get("Key"), str, "DeployKeys.Key"),
            )
        )

    branches: Mapping[str, Any] = _expect(
        name, document.get("BranchManagement") or {}, dict, "BranchManagement"
    )
    allow_pushes = {}
    for pattern, rule in _expect(
        name, branches.get("AllowPushes") or {}, dict, "BranchManagement.AllowPushes"
    ).items():
        _expect(name, rule, dict, f"AllowPushes.{pattern}")
        allow_pushes[pattern] = PushRule(
            users=_strings(name, rule.get("Users"), f"AllowPushes.{pattern}.Users"),
            groups=_strings(name, rule.get("Groups"), f"AllowPushes.{pattern}.Groups"),
        )

    access: Mapping[str, Any] = _expect(
        name, document.get("AccessManagement") or {}, dict, "AccessManagement"
    )

    return Policy(
        landing_page=_expect(name, document.get("LandingPage") or "", str, "LandingPage"),
        private=private,
        forks=forks,
        issue_tracker=issue_tracker,
        main_branch=_expect(name, document.get("MainBranch") or "", str, "MainBranch"),
        deploy_keys=tuple(deploy_keys),
        post_hooks=_strings(name, document.get("PostHooks"), "PostHooks"),
        branch_management=BranchManagement(
            prevent_delete=_strings(name, branches.get("PreventDelete"), "PreventDelete"),
            prevent_rebase=_strings(name, branches.get("PreventRebase"), "PreventRebase"),
            allow_pushes=MappingProxyType(allow_pushes),
        ),
        access_management=AccessManagement(
            users=MappingProxyType(_grants(name, access.get("Users"), "AccessManagement.Users")),
            groups=MappingProxyType(_grants(name, access.get("Groups"), "AccessManagement.Groups")),
        ),
    )
