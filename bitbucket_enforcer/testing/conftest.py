"""
Pytest plugin for Bitbucket Enforcer testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["bitbucket_enforcer.testing.conftest"]
"""

from bitbucket_enforcer.testing.fixtures import (
    mock_client,
    policy_dir,
    policy_loader,
    repo_ref,
)

__all__ = [
    "mock_client",
    "repo_ref",
    "policy_dir",
    "policy_loader",
]
