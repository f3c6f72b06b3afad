"""Repositories resource client.

Roster listing and revision tokens use the 2.0 API; scalar repository
settings are read and written through the 1.0 API.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from bitbucket_enforcer.exceptions import ValidationError
from bitbucket_enforcer.transport import invalid_response, parse_items
from bitbucket_enforcer.types.policy import FORK_POLICIES, ISSUE_TRACKERS
from bitbucket_enforcer.types.repos import Repository, RepositoryRef, RepositorySettings

if TYPE_CHECKING:
    from bitbucket_enforcer.transport import HTTPTransport

# no_forks / no_public_forks per fork policy
_FORK_FIELDS = {
    "none": ("True", "True"),
    "private": ("False", "True"),
    "public": ("False", "False"),
}


def iter_pages(
    transport: "HTTPTransport", path: str, params: dict[str, Any] | None = None
) -> Iterator[dict[str, Any]]:
    """Yield every value of a paginated 2.0 collection."""
    page = 1
    while True:
        data = transport.request_json(
            "GET", path, params={**(params or {}), "page": page}
        ) or {}
        if not isinstance(data, dict):
            raise invalid_response(path, f"expected a page object, got {type(data).__name__}")
        values = data.get("values") or []
        if not isinstance(values, list):
            raise invalid_response(path, f"expected a list of values, got {type(values).__name__}")
        yield from values

        if not values or not data.get("next"):
            break
        page += 1


def _parse_repository(entry: dict[str, Any]) -> Repository:
    return Repository(full_name=entry["full_name"], description=entry.get("description") or "")


def _to_bool(value: Any) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    return str(value).lower() == "true"


class ReposClient:
    """Client for repository-related operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the repos client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def list(self, owner: str) -> list[Repository]:
        """
        List all repositories owned by ``owner``, following pagination.

        Returns:
            List of Repository objects
        """
        path = f"/2.0/repositories/{owner}"
        return parse_items(list(iter_pages(self.transport, path)), _parse_repository, path)

    def revision(self, owner: str) -> str:
        """
        Get the revision token (ETag) of the owner's repository listing.

        Returns:
            The ETag header value, or "" if the server sent none
        """
        response = self.transport.request("HEAD", f"/2.0/repositories/{owner}")
        return response.headers.get("ETag", "")

    def get_settings(self, ref: RepositoryRef) -> RepositorySettings:
        """
        Get the current scalar settings of a repository.

        Raises:
            NotFoundError: If repository not found
        """
        data = self.transport.request_json("GET", self._path(ref)) or {}
        if not isinstance(data, dict):
            raise invalid_response(self._path(ref), f"expected an object, got {type(data).__name__}")
        return RepositorySettings(
            is_private=_to_bool(data.get("is_private")),
            no_forks=_to_bool(data.get("no_forks")),
            no_public_forks=_to_bool(data.get("no_public_forks")),
            has_issues=_to_bool(data.get("has_issues")),
            landing_page=data.get("landing_page"),
            main_branch=data.get("main_branch"),
        )

    def set_privacy(self, ref: RepositoryRef, is_private: bool) -> None:
        """Set the repository visibility."""
        self._put(ref, {"is_private": "true" if is_private else "false"})

    def set_forks(self, ref: RepositoryRef, forks: str) -> None:
        """
        Set the forking policy: "none", "private" or "public".

        Raises:
            ValidationError: On an unknown policy, before any request is made
        """
        if forks not in FORK_POLICIES:
            raise ValidationError(
                "INVALID_FORK_POLICY",
                f"Fork policy '{forks}' not valid. One of {', '.join(FORK_POLICIES)} required",
            )
        no_forks, no_public_forks = _FORK_FIELDS[forks]
        self._put(ref, {"no_forks": no_forks, "no_public_forks": no_public_forks})

    def set_landing_page(self, ref: RepositoryRef, landing_page: str) -> None:
        """
        Set the landing page: "branches", "commits", "downloads",
        "overview", "pull_requests" or "source".
        """
        self._put(ref, {"landing_page": landing_page})

    def set_issue_tracker(self, ref: RepositoryRef, issue_tracker: str) -> None:
        """
        Set whether the repository has a public issue tracker or none.

        Private issue trackers are not supported by the API.

        Raises:
            ValidationError: On anything but "none" or "public"
        """
        if issue_tracker not in ISSUE_TRACKERS:
            raise ValidationError(
                "INVALID_ISSUE_TRACKER",
                f"Issue tracker setting '{issue_tracker}' not valid. 'none' or 'public' required",
            )
        self._put(ref, {"has_issues": "true" if issue_tracker == "public" else "false"})

    def set_main_branch(self, ref: RepositoryRef, main_branch: str) -> None:
        """Set the main branch."""
        self._put(ref, {"main_branch": main_branch})

    def set_description(self, ref: RepositoryRef, description: str) -> None:
        """Replace the repository description."""
        self._put(ref, {"description": description})

    def _put(self, ref: RepositoryRef, fields: dict[str, str]) -> None:
        self.transport.request("PUT", self._path(ref), data=fields)

    @staticmethod
    def _path(ref: RepositoryRef) -> str:
        return f"/1.0/repositories/{ref.owner}/{ref.slug}"
