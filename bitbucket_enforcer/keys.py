"""Deploy key matching.

Declared keys are matched against remote keys by content first and label
second. Remote keys whose content no declared key mentions are never
touched: enforcement only ever adds keys, or re-creates a key whose label
is wrong.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

from bitbucket_enforcer.logging import get_logger
from bitbucket_enforcer.types.policy import DeployKeySpec
from bitbucket_enforcer.types.repos import RemoteDeployKey, RepositoryRef

if TYPE_CHECKING:
    from bitbucket_enforcer.client import BitbucketClient

logger = get_logger("reconcile")


class MatchKind(IntEnum):
    """How a remote key relates to a declared one, ordered by precedence."""

    NONE = 0
    CONTENT = 1  # same key material, different label
    EXACT = 2  # same key material and label


@dataclass
class KeyPlan:
    """Deletions and additions needed to converge deploy keys."""

    delete: list[RemoteDeployKey] = field(default_factory=list)
    add: list[DeployKeySpec] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.delete and not self.add


def match(remote: RemoteDeployKey, declared: DeployKeySpec) -> MatchKind:
    """Classify one remote key against one declared key."""
    if remote.key != declared.key:
        return MatchKind.NONE
    if remote.label == declared.name:
        return MatchKind.EXACT
    return MatchKind.CONTENT


def classify(
    remote: RemoteDeployKey, declared: Sequence[DeployKeySpec]
) -> tuple[MatchKind, int | None]:
    """
    Find the best match for a remote key among declared keys.

    Returns:
        The strongest MatchKind and the index of the first declared key
        reaching it (None for MatchKind.NONE)
    """
    best, index = MatchKind.NONE, None
    for i, spec in enumerate(declared):
        kind = match(remote, spec)
        if kind > best:
            best, index = kind, i
            if kind is MatchKind.EXACT:
                break
    return best, index


def plan(
    remote_keys: Sequence[RemoteDeployKey], declared: Sequence[DeployKeySpec]
) -> KeyPlan:
    """
    Compute the deploy key changes for a repository.

    Each exact match consumes one declared entry. A content match schedules
    the remote key for deletion and leaves the declared entry to be added
    again under its declared label.
    """
    pending = list(declared)
    result = KeyPlan()

    for remote in remote_keys:
        kind, index = classify(remote, pending)
        if kind is MatchKind.EXACT:
            del pending[index]
        elif kind is MatchKind.CONTENT:
            result.delete.append(remote)

    result.add = pending
    return result


def reconcile_deploy_keys(
    client: "BitbucketClient", ref: RepositoryRef, declared: Sequence[DeployKeySpec]
) -> KeyPlan:
    """
    Converge the deploy keys of a repository. Deletions run before additions.

    Returns:
        The plan that was applied
    """
    remote_keys = client.deploy_keys.list(ref)
    key_plan = plan(remote_keys, declared)

    for remote in key_plan.delete:
        logger.info("%s: removing deploy key %r (id %s)", ref, remote.label, remote.id)
        client.deploy_keys.delete(ref, remote.id)

    for spec in key_plan.add:
        logger.info("%s: adding deploy key %r", ref, spec.name)
        client.deploy_keys.add(ref, spec.name, spec.key)

    return key_plan
