"""Marks a repository as enforced by appending a marker to its description."""

from typing import TYPE_CHECKING

from bitbucket_enforcer.exceptions import EnforcerError
from bitbucket_enforcer.gate import ENFORCED_MARKER
from bitbucket_enforcer.logging import get_logger
from bitbucket_enforcer.types.repos import RepositoryRef

if TYPE_CHECKING:
    from bitbucket_enforcer.client import BitbucketClient

logger = get_logger()


def marked_description(description: str) -> str:
    """The description with the enforced marker appended on its own paragraph."""
    return f"{description.strip()}\n\n{ENFORCED_MARKER}"


def mark_enforced(client: "BitbucketClient", ref: RepositoryRef, description: str) -> bool:
    """
    Record that enforcement completed.

    The marker also makes the gate skip the repository from now on.

    Returns:
        False if the description could not be written; the repository is
        then enforced again on the next cycle
    """
    try:
        client.repos.set_description(ref, marked_description(description))
    except EnforcerError as e:
        logger.warning("%s: enforced, but writing the marker failed: %s", ref, e)
        return False
    return True
