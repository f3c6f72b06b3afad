"""Enforcement gate.

Reads the markers a repository carries in its description and decides
whether to enforce it, and with which policy. Skip markers always win over
the selector.
"""

import string
from dataclasses import dataclass

NOENFORCE_MARKER = "-noenforce"
ENFORCED_MARKER = "-enforced"
SELECTOR = "-enforce"
DEFAULT_POLICY = "default"

_POLICY_NAME_CHARS = frozenset(string.ascii_letters + string.digits)


@dataclass(frozen=True)
class GateDecision:
    """Outcome of inspecting a repository description."""

    skip: bool
    policy_name: str | None = None
    reason: str = ""


def read_selector(description: str) -> str | None:
    """
    Find the first ``-enforce[=name]`` selector.

    Returns:
        None when there is no selector, the alphanumeric name following
        ``=`` when there is one, and "" for a bare ``-enforce``
    """
    start = description.find(SELECTOR)
    if start < 0:
        return None

    pos = start + len(SELECTOR)
    if pos >= len(description) or description[pos] != "=":
        return ""

    end = pos + 1
    while end < len(description) and description[end] in _POLICY_NAME_CHARS:
        end += 1
    return description[pos + 1:end]


def inspect(description: str) -> GateDecision:
    """
    Decide whether and how a repository should be enforced.

    Rules, first match wins:
      1. ``-noenforce`` anywhere: skip.
      2. ``-enforced`` anywhere: skip, the repository is settled.
      3. ``-enforce=name``: enforce policy ``name``. A bare ``-enforce``
         yields the empty policy name, which will fail to load.
      4. No marker: enforce the ``default`` policy.
    """
    if NOENFORCE_MARKER in description:
        return GateDecision(skip=True, reason="noenforce")

    if ENFORCED_MARKER in description:
        return GateDecision(skip=True, reason="enforced")

    selector = read_selector(description)
    if selector is None:
        return GateDecision(skip=False, policy_name=DEFAULT_POLICY, reason="default")

    return GateDecision(skip=False, policy_name=selector, reason="selector")
