"""Bitbucket Enforcer testing utilities.

Provides an in-memory mock client and fixtures for testing enforcement
without a Bitbucket account.
"""

from bitbucket_enforcer.testing.fixtures import sample_policy_document, write_policy
from bitbucket_enforcer.testing.mock import (
    FakeRepository,
    MockBitbucketClient,
    MockCall,
    MockError,
)

__all__ = [
    # Mock client
    "MockBitbucketClient",
    "MockCall",
    "MockError",
    "FakeRepository",
    # Helper functions
    "sample_policy_document",
    "write_policy",
]
