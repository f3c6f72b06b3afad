"""Roster change detection."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from bitbucket_enforcer.exceptions import EnforcerError
from bitbucket_enforcer.logging import get_logger

if TYPE_CHECKING:
    from bitbucket_enforcer.client import BitbucketClient

logger = get_logger("detector")


@dataclass(frozen=True)
class PollResult:
    """Outcome of one roster poll."""

    changed: bool
    token: str | None


class ChangeDetector:
    """
    Decides whether an owner's repository roster changed since the last
    observed revision token (the ETag of the roster listing).

    Poll errors never propagate: they are logged and reported as
    "unchanged" with the previous token, so the next tick retries.
    """

    def __init__(self, client: "BitbucketClient") -> None:
        self.client = client

    def poll(self, owner: str, last_token: str | None) -> PollResult:
        """
        Poll the roster revision.

        Args:
            owner: Account whose repositories are watched
            last_token: Token returned by the previous successful poll, or
                None before the first one

        Returns:
            PollResult; ``token`` must be persisted by the caller
        """
        try:
            token = self.client.repos.revision(owner)
        except EnforcerError as e:
            logger.warning("Polling repositories of %s failed: %s", owner, e)
            return PollResult(changed=False, token=last_token)

        if token == last_token:
            return PollResult(changed=False, token=last_token)

        logger.debug("Roster of %s changed: %r -> %r", owner, last_token, token)
        return PollResult(changed=True, token=token)
