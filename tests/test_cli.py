"""
Tests for the command-line entry point.

Feature: bitbucket-enforcer
"""

import os
from pathlib import Path
from types import SimpleNamespace

import pytest

from bitbucket_enforcer import cli
from bitbucket_enforcer.runner import DEFAULT_INTERVAL
from bitbucket_enforcer.testing import MockBitbucketClient, write_policy

CREDENTIALS = ("BITBUCKET_ENFORCER_USERNAME", "BITBUCKET_ENFORCER_API_KEY")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Unset enforcer variables; anything set later is removed on teardown."""
    for name in (*CREDENTIALS, "BITBUCKET_ENFORCER_OWNER", "BITBUCKET_ENFORCER_BASE_URL"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def patched_client(monkeypatch: pytest.MonkeyPatch) -> MockBitbucketClient:
    mock = MockBitbucketClient(username="acme")
    monkeypatch.setattr(cli, "BitbucketClient", SimpleNamespace(from_env=lambda: mock))
    return mock


class TestParser:
    """Tests for build_parser."""

    def test_defaults(self) -> None:
        args = cli.build_parser().parse_args([])

        assert args.configdir == "configs"
        assert args.verbose is False
        assert args.interval == DEFAULT_INTERVAL
        assert args.once is False
        assert args.env_file == ".env"

    def test_flags(self) -> None:
        args = cli.build_parser().parse_args(
            ["--configdir", "/etc/policies", "-v", "--interval", "30", "--once"]
        )

        assert args.configdir == "/etc/policies"
        assert args.verbose is True
        assert args.interval == 30.0
        assert args.once is True


class TestLoadEnvironment:
    """Tests for load_environment."""

    def test_reads_dotenv_file(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("BITBUCKET_ENFORCER_OWNER=acme-team\n", encoding="utf-8")

        cli.load_environment(str(env_file))

        assert os.environ["BITBUCKET_ENFORCER_OWNER"] == "acme-team"

    def test_missing_file_is_not_an_error(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        cli.load_environment(str(tmp_path / "absent.env"))

        assert "BITBUCKET_ENFORCER_OWNER" not in os.environ


class TestMain:
    """Tests for main."""

    def test_missing_config_dir(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        code = cli.main([
            "--configdir", str(tmp_path / "nope"),
            "--env-file", str(tmp_path / "absent.env"),
            "--once",
        ])

        assert code == 1

    def test_missing_credentials(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        code = cli.main([
            "--configdir", str(tmp_path),
            "--env-file", str(tmp_path / "absent.env"),
            "--once",
        ])

        assert code == 1

    def test_single_cycle(
        self,
        clean_env: pytest.MonkeyPatch,
        patched_client: MockBitbucketClient,
        tmp_path: Path,
    ) -> None:
        write_policy(tmp_path, "default", {"Private": True})
        patched_client.add_repository("acme/widgets", description="Widgets")

        code = cli.main([
            "--configdir", str(tmp_path),
            "--env-file", str(tmp_path / "absent.env"),
            "--once",
        ])

        assert code == 0
        assert patched_client.was_called("repos.set_privacy")
        assert patched_client.repositories["acme/widgets"].description == "Widgets\n\n-enforced"

    def test_owner_from_environment(
        self,
        clean_env: pytest.MonkeyPatch,
        patched_client: MockBitbucketClient,
        tmp_path: Path,
    ) -> None:
        clean_env.setenv("BITBUCKET_ENFORCER_OWNER", "acme-team")
        args = cli.build_parser().parse_args(["--configdir", str(tmp_path)])

        enforcer = cli.build_enforcer(args)

        assert enforcer.owner == "acme-team"
        assert enforcer.client is patched_client
