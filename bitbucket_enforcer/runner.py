"""
The enforcement loop.

Polls the roster on a fixed interval and, when it changed, walks every
repository through gate, reconciler and marker writer, one at a time.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from bitbucket_enforcer import gate
from bitbucket_enforcer.detector import ChangeDetector
from bitbucket_enforcer.exceptions import EnforcerError, PolicyError
from bitbucket_enforcer.logging import get_logger
from bitbucket_enforcer.marker import mark_enforced
from bitbucket_enforcer.types.repos import Repository

if TYPE_CHECKING:
    from bitbucket_enforcer.client import BitbucketClient
    from bitbucket_enforcer.reconciler import Reconciler

logger = get_logger()

DEFAULT_INTERVAL = 1.0


class Outcome(str, Enum):
    """What happened to a repository during a cycle."""

    SKIPPED = "skipped"
    ENFORCED = "enforced"
    UNMARKED = "unmarked"  # enforced, but the marker write failed
    FAILED = "failed"


@dataclass
class CycleReport:
    """Summary of one tick."""

    changed: bool
    token: str | None = None
    outcomes: dict[str, Outcome] = field(default_factory=dict)


class Enforcer:
    """
    Drives an owner's repositories toward their policies, forever.

    The revision token of the last observed roster lives here and only
    here; it is lost on restart, which makes the first cycle enforce
    everything that is not marked.
    """

    def __init__(
        self,
        client: "BitbucketClient",
        owner: str,
        reconciler: "Reconciler",
        detector: ChangeDetector | None = None,
        interval: float = DEFAULT_INTERVAL,
        stop_event: threading.Event | None = None,
    ) -> None:
        """
        Args:
            client: Authenticated Bitbucket client
            owner: Account whose repositories are enforced
            reconciler: Applies policies to repositories
            detector: Roster change detector (default: one over ``client``)
            interval: Seconds between polls
            stop_event: Event that ends ``run`` when set
        """
        self.client = client
        self.owner = owner
        self.reconciler = reconciler
        self.detector = detector or ChangeDetector(client)
        self.interval = interval
        self.token: str | None = None
        self._stop = stop_event or threading.Event()

    def stop(self) -> None:
        """Ask ``run`` to return after the current cycle."""
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run(self) -> None:
        """Run cycles every ``interval`` seconds until stopped."""
        logger.info("Watching repositories of %s every %ss", self.owner, self.interval)
        while not self._stop.is_set():
            self.run_once()
            self._stop.wait(self.interval)
        logger.info("Stopped")

    def run_once(self) -> CycleReport:
        """Run a single cycle."""
        result = self.detector.poll(self.owner, self.token)
        self.token = result.token

        report = CycleReport(changed=result.changed, token=result.token)
        if not result.changed:
            logger.debug("No repository changes, sleeping.")
            return report

        try:
            repositories = self.client.repos.list(self.owner)
        except EnforcerError as e:
            logger.warning("Listing repositories of %s failed: %s", self.owner, e)
            return report

        for repo in repositories:
            try:
                report.outcomes[repo.full_name] = self.process(repo)
            except Exception:
                logger.exception("Unexpected error while enforcing <%s>", repo.full_name)
                report.outcomes[repo.full_name] = Outcome.FAILED

        return report

    def process(self, repo: Repository) -> Outcome:
        """Gate, enforce and mark one repository."""
        decision = gate.inspect(repo.description)
        if decision.skip:
            logger.info("Skipping <%s> because of '-%s'", repo.full_name, decision.reason)
            return Outcome.SKIPPED

        if decision.policy_name == "":
            logger.warning(
                "<%s> has '-enforce' without a policy name; no policy can be loaded",
                repo.full_name,
            )

        try:
            ref = repo.ref
            self.reconciler.enforce(ref, decision.policy_name)
        except PolicyError as e:
            logger.error("Policy %r for <%s> failed to load: %s", e.policy_name, repo.full_name, e)
            return Outcome.FAILED
        except EnforcerError as e:
            logger.warning("Enforcing <%s> failed: %s", repo.full_name, e)
            return Outcome.FAILED

        if not mark_enforced(self.client, ref, repo.description):
            return Outcome.UNMARKED

        logger.info("Enforced policy %r on <%s>", decision.policy_name, repo.full_name)
        return Outcome.ENFORCED
