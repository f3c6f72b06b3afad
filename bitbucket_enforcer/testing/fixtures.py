"""
Pytest fixtures for Bitbucket Enforcer testing.
"""

import json
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from bitbucket_enforcer.policy import PolicyLoader
from bitbucket_enforcer.testing.mock import MockBitbucketClient
from bitbucket_enforcer.types.repos import RepositoryRef

SAMPLE_KEY = "ssh-rsa AAAAB3NzaC1yc2EAAAADAQABAAABAQCsample ci@example.com"


def sample_policy_document(**overrides: Any) -> dict[str, Any]:
    """A policy document exercising every facet, in policy-file format."""
    document: dict[str, Any] = {
        "LandingPage": "source",
        "Private": True,
        "Forks": "private",
        "IssueTracker": "public",
        "MainBranch": "main",
        "DeployKeys": [{"Name": "ci", "Key": SAMPLE_KEY}],
        "PostHooks": ["https://hooks.example.com/bitbucket"],
        "BranchManagement": {
            "PreventDelete": ["main"],
            "PreventRebase": ["main", "release/*"],
            "AllowPushes": {"main": {"Users": ["alice"], "Groups": ["releasers"]}},
        },
        "AccessManagement": {
            "Users": {"alice": "admin", "bob": "write"},
            "Groups": {"developers": "read"},
        },
    }
    document.update(overrides)
    return document


def write_policy(config_dir: Path, name: str, document: dict[str, Any]) -> Path:
    """Write ``document`` as ``<config_dir>/<name>.json``."""
    path = config_dir / f"{name}.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture
def mock_client() -> Generator[MockBitbucketClient, None, None]:
    """
    Provide a MockBitbucketClient for testing.

    Example:
        ```python
        def test_my_feature(mock_client):
            mock_client.add_repository("mock-user/repo")
            ...
            assert mock_client.was_called("repos.set_privacy")
        ```
    """
    client = MockBitbucketClient(username="mock-user")
    yield client
    client.reset()


@pytest.fixture
def repo_ref() -> RepositoryRef:
    """Provide the reference of the sample repository."""
    return RepositoryRef(owner="mock-user", slug="widgets")


@pytest.fixture
def policy_dir(tmp_path: Path) -> Path:
    """Provide a policy directory holding a ``default`` sample policy."""
    write_policy(tmp_path, "default", sample_policy_document())
    return tmp_path


@pytest.fixture
def policy_loader(policy_dir: Path) -> PolicyLoader:
    """Provide a PolicyLoader over ``policy_dir``."""
    return PolicyLoader(policy_dir)
