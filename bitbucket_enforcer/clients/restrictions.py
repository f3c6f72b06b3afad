"""Branch restrictions resource client."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from bitbucket_enforcer.clients.repos import iter_pages
from bitbucket_enforcer.transport import parse_items
from bitbucket_enforcer.types.repos import BranchRestriction, RepositoryRef

if TYPE_CHECKING:
    from bitbucket_enforcer.transport import HTTPTransport

RESTRICTION_KINDS = ("delete", "force", "push")


def _parse_restriction(data: dict[str, Any]) -> BranchRestriction:
    return BranchRestriction(
        id=data.get("id"),
        kind=data["kind"],
        pattern=data["pattern"],
        users=tuple(user["username"] for user in data.get("users") or []),
        groups=tuple(group["slug"] for group in data.get("groups") or []),
    )


class RestrictionsClient:
    """Client for branch restrictions."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the restrictions client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def list(self, ref: RepositoryRef) -> list[BranchRestriction]:
        """
        List the branch restrictions of a repository.

        Returns:
            List of BranchRestriction objects
        """
        path = self._path(ref)
        return parse_items(list(iter_pages(self.transport, path)), _parse_restriction, path)

    def add(
        self,
        ref: RepositoryRef,
        kind: str,
        pattern: str,
        users: Sequence[str] = (),
        groups: Sequence[str] = (),
    ) -> None:
        """
        Add a branch restriction.

        Groups are addressed by slug and owned by the repository owner.

        Args:
            ref: Target repository
            kind: "delete", "force" or "push"
            pattern: Branch name or glob pattern
            users: Usernames the restriction applies to
            groups: Group slugs the restriction applies to

        Raises:
            ConflictError: If an identical restriction already exists
        """
        body = {
            "kind": kind,
            "pattern": pattern,
            "users": [{"username": username} for username in users],
            "groups": [
                {"slug": slug, "owner": {"username": ref.owner}} for slug in groups
            ],
        }
        self.transport.request("POST", self._path(ref), json=body)

    @staticmethod
    def _path(ref: RepositoryRef) -> str:
        return f"/2.0/repositories/{ref.owner}/{ref.slug}/branch-restrictions"
