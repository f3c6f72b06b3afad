"""Bitbucket Enforcer - keeps Bitbucket repositories in line with declared policies."""

from bitbucket_enforcer.client import BitbucketClient
from bitbucket_enforcer.detector import ChangeDetector, PollResult
from bitbucket_enforcer.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    EnforcerError,
    NotFoundError,
    PolicyError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from bitbucket_enforcer.gate import GateDecision, inspect
from bitbucket_enforcer.keys import KeyPlan, MatchKind, plan
from bitbucket_enforcer.logging import configure_logging, get_logger
from bitbucket_enforcer.marker import mark_enforced
from bitbucket_enforcer.policy import PolicyLoader
from bitbucket_enforcer.reconciler import Reconciler
from bitbucket_enforcer.runner import CycleReport, Enforcer, Outcome
from bitbucket_enforcer.transport import HTTPTransport, RetryConfig

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main client
    "BitbucketClient",
    # Engine
    "ChangeDetector",
    "PollResult",
    "GateDecision",
    "inspect",
    "KeyPlan",
    "MatchKind",
    "plan",
    "PolicyLoader",
    "Reconciler",
    "mark_enforced",
    "Enforcer",
    "CycleReport",
    "Outcome",
    # Exceptions
    "EnforcerError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitedError",
    "ValidationError",
    "ServerError",
    "ConfigurationError",
    "PolicyError",
    # Transport
    "HTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
