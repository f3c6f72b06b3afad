"""Service hooks resource client."""

from typing import TYPE_CHECKING, Any

from bitbucket_enforcer.transport import parse_items
from bitbucket_enforcer.types.repos import RepositoryRef, Service

if TYPE_CHECKING:
    from bitbucket_enforcer.transport import HTTPTransport


def _parse_service(entry: dict[str, Any]) -> Service:
    service = entry["service"]
    return Service(
        id=entry["id"],
        type=service["type"],
        fields={item["name"]: item.get("value") or "" for item in service.get("fields") or []},
    )


class ServicesClient:
    """Client for the service hooks (webhooks) of a repository."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the services client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def list(self, ref: RepositoryRef) -> list[Service]:
        """
        List the service hooks attached to a repository.

        Returns:
            List of Service objects; fields are flattened to a name -> value dict
        """
        path = self._path(ref)
        return parse_items(self.transport.request_json("GET", path) or [], _parse_service, path)

    def add(self, ref: RepositoryRef, service_type: str, fields: dict[str, str]) -> None:
        """
        Attach a new service hook.

        Args:
            ref: Target repository
            service_type: Hook type, e.g. "POST"
            fields: Hook parameters, e.g. {"URL": "https://..."}
        """
        self.transport.request(
            "POST", self._path(ref), data={"type": service_type, **fields}
        )

    @staticmethod
    def _path(ref: RepositoryRef) -> str:
        return f"/1.0/repositories/{ref.owner}/{ref.slug}/services"
