"""Deploy keys resource client."""

from typing import TYPE_CHECKING, Any

from bitbucket_enforcer.transport import parse_items
from bitbucket_enforcer.types.repos import RemoteDeployKey, RepositoryRef

if TYPE_CHECKING:
    from bitbucket_enforcer.transport import HTTPTransport


def _parse_key(entry: dict[str, Any]) -> RemoteDeployKey:
    return RemoteDeployKey(id=entry["pk"], key=entry["key"], label=entry.get("label") or "")


class DeployKeysClient:
    """Client for repository deploy keys."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the deploy keys client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def list(self, ref: RepositoryRef) -> list[RemoteDeployKey]:
        """
        List the deploy keys attached to a repository.

        Returns:
            List of RemoteDeployKey objects with id, key and label
        """
        path = self._path(ref)
        return parse_items(self.transport.request_json("GET", path) or [], _parse_key, path)

    def add(self, ref: RepositoryRef, name: str, key: str) -> None:
        """
        Attach a new deploy key to a repository.

        Args:
            ref: Target repository
            name: Label of the key
            key: Public key material
        """
        self.transport.request("POST", self._path(ref), data={"label": name, "key": key})

    def delete(self, ref: RepositoryRef, key_id: int) -> None:
        """Remove a deploy key from a repository."""
        self.transport.request("DELETE", f"{self._path(ref)}/{key_id}")

    @staticmethod
    def _path(ref: RepositoryRef) -> str:
        return f"/1.0/repositories/{ref.owner}/{ref.slug}/deploy-keys"
