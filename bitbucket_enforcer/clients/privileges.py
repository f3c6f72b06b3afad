"""Repository privileges resource client."""

from typing import TYPE_CHECKING, Any

from bitbucket_enforcer.transport import parse_items
from bitbucket_enforcer.types.policy import Permission
from bitbucket_enforcer.types.repos import Privilege, RepositoryRef

if TYPE_CHECKING:
    from bitbucket_enforcer.transport import HTTPTransport


def _parse_user(entry: dict[str, Any]) -> Privilege:
    return Privilege(name=entry["user"]["username"], permission=entry["privilege"])


def _parse_group(entry: dict[str, Any]) -> Privilege:
    return Privilege(name=entry["group"]["slug"], permission=entry["privilege"])


class PrivilegesClient:
    """Client for user and group permissions on a repository."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the privileges client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def list_users(self, ref: RepositoryRef) -> list[Privilege]:
        """List the users with an explicit permission on a repository."""
        path = f"/1.0/privileges/{ref.owner}/{ref.slug}"
        return parse_items(self.transport.request_json("GET", path) or [], _parse_user, path)

    def list_groups(self, ref: RepositoryRef) -> list[Privilege]:
        """List the groups with a permission on a repository, by slug."""
        path = f"/1.0/group-privileges/{ref.owner}/{ref.slug}"
        return parse_items(self.transport.request_json("GET", path) or [], _parse_group, path)

    def grant_user(self, ref: RepositoryRef, username: str, permission: str) -> None:
        """
        Grant a user a permission on a repository.

        Args:
            ref: Target repository
            username: User to grant
            permission: "read", "write" or "admin"

        Raises:
            ValidationError: On any other permission, before a request is made
        """
        level = Permission.parse(permission)
        self.transport.request(
            "PUT",
            f"/1.0/privileges/{ref.owner}/{ref.slug}/{username}",
            content=level.value,
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )

    def grant_group(self, ref: RepositoryRef, group: str, permission: str) -> None:
        """
        Grant a group owned by the repository owner a permission.

        Raises:
            ValidationError: On an invalid permission, before a request is made
        """
        level = Permission.parse(permission)
        self.transport.request(
            "PUT",
            f"/1.0/group-privileges/{ref.owner}/{ref.slug}/{ref.owner}/{group}",
            content=level.value,
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )
