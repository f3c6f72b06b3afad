"""
Bitbucket Enforcer API client.

One authenticated handle over the Bitbucket API, constructed once and
passed to the change detector and the reconciler.
"""

import os
from typing import Any

from bitbucket_enforcer.clients import (
    DeployKeysClient,
    PrivilegesClient,
    ReposClient,
    RestrictionsClient,
    ServicesClient,
)
from bitbucket_enforcer.exceptions import ConfigurationError
from bitbucket_enforcer.transport import HTTPTransport, RetryConfig


class BitbucketClient:
    """
    Main client for interacting with the Bitbucket API.

    Aggregates all resource clients and handles authentication.

    Example:
        ```python
        from bitbucket_enforcer import BitbucketClient

        client = BitbucketClient(username="acme", api_key="...")

        # Or create from environment variables
        client = BitbucketClient.from_env()

        for repo in client.repos.list("acme"):
            print(repo.full_name)
        ```
    """

    DEFAULT_BASE_URL = "https://api.bitbucket.org"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        username: str,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """
        Initialize the Bitbucket client.

        Args:
            username: Bitbucket account name
            api_key: API key for the account
            base_url: Base URL for API requests (default: https://api.bitbucket.org)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
        """
        self.username = username
        self.base_url = base_url
        self.timeout = timeout

        self._transport = HTTPTransport(
            base_url=base_url,
            username=username,
            api_key=api_key,
            timeout=timeout,
            retry_config=retry_config,
        )

        self.repos = ReposClient(self._transport)
        self.deploy_keys = DeployKeysClient(self._transport)
        self.services = ServicesClient(self._transport)
        self.restrictions = RestrictionsClient(self._transport)
        self.privileges = PrivilegesClient(self._transport)

    @classmethod
    def from_env(
        cls,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> "BitbucketClient":
        """
        Create a client from environment variables.

        Environment variables:
            BITBUCKET_ENFORCER_USERNAME: Account name (required)
            BITBUCKET_ENFORCER_API_KEY: API key (required)
            BITBUCKET_ENFORCER_BASE_URL: Base URL for API (optional)

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        username = os.environ.get("BITBUCKET_ENFORCER_USERNAME")
        api_key = os.environ.get("BITBUCKET_ENFORCER_API_KEY")
        base_url = os.environ.get("BITBUCKET_ENFORCER_BASE_URL", cls.DEFAULT_BASE_URL)

        if not username:
            raise ConfigurationError(
                "BITBUCKET_ENFORCER_USERNAME environment variable not set"
            )

        if not api_key:
            raise ConfigurationError(
                "BITBUCKET_ENFORCER_API_KEY environment variable not set"
            )

        return cls(
            username=username,
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            retry_config=retry_config,
        )

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "BitbucketClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()
