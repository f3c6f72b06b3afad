"""
Command-line entry point.

Loads credentials (optionally from a ``.env`` file), builds the client and
runs the enforcement loop until interrupted. Configuration errors are the
only failures that end the process.
"""

import argparse
import logging
import os
import signal
import sys
from collections.abc import Sequence
from pathlib import Path

from dotenv import load_dotenv

from bitbucket_enforcer.client import BitbucketClient
from bitbucket_enforcer.exceptions import ConfigurationError
from bitbucket_enforcer.logging import configure_logging, get_logger
from bitbucket_enforcer.policy import PolicyLoader
from bitbucket_enforcer.reconciler import Reconciler
from bitbucket_enforcer.runner import DEFAULT_INTERVAL, Enforcer

logger = get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bitbucket-enforcer",
        description="Continuously enforce repository policies on Bitbucket",
    )
    parser.add_argument(
        "--configdir",
        default="configs",
        help="the folder containing repository configurations",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="print more output")
    parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL,
        help="seconds between roster polls",
    )
    parser.add_argument("--once", action="store_true", help="run a single cycle and exit")
    parser.add_argument("--env-file", default=".env", help="dotenv file with credentials")
    return parser


def load_environment(env_file: str) -> None:
    """Load ``env_file`` into the environment; a missing file is not an error."""
    if not Path(env_file).is_file():
        logger.info("No %s file, using the process environment", env_file)
        return
    load_dotenv(env_file)


def build_enforcer(args: argparse.Namespace) -> Enforcer:
    """
    Wire client, loader, reconciler and loop together.

    Raises:
        ConfigurationError: On missing credentials or policy directory
    """
    config_dir = Path(args.configdir)
    if not config_dir.is_dir():
        raise ConfigurationError(f"Policy directory '{config_dir}' does not exist")

    client = BitbucketClient.from_env()
    owner = os.environ.get("BITBUCKET_ENFORCER_OWNER") or client.username
    reconciler = Reconciler(client, PolicyLoader(config_dir, verbose=args.verbose))
    return Enforcer(client, owner, reconciler, interval=args.interval)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    load_environment(args.env_file)

    try:
        enforcer = build_enforcer(args)
    except ConfigurationError as e:
        logger.critical("%s", e)
        return 1

    with enforcer.client:
        if args.once:
            enforcer.run_once()
            return 0

        for signum in (signal.SIGINT, signal.SIGTERM):
            signal.signal(signum, lambda *_: enforcer.stop())
        enforcer.run()

    return 0


if __name__ == "__main__":
    sys.exit(main())
