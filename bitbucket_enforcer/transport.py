"""
HTTP Transport for Bitbucket Enforcer.

Handles HTTP communication with the Bitbucket API: basic authentication,
automatic retry logic and error handling.
"""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx

from bitbucket_enforcer.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    EnforcerError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from bitbucket_enforcer.logging import log_http_request, log_http_response


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


# Status codes with a dedicated exception; other 4xx are ValidationError,
# 5xx ServerError. 429 is built separately for its Retry-After.
_STATUS_ERRORS: dict[int, type[EnforcerError]] = {
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    409: ConflictError,
}

T = TypeVar("T")


def invalid_response(path: str, detail: str, status_code: int | None = None) -> ServerError:
    """Error for a successful response whose body cannot be used."""
    return ServerError("INVALID_RESPONSE", f"Unexpected response from {path}: {detail}", status_code)


def parse_items(entries: Any, parse: Callable[[Any], T], path: str) -> list[T]:
    """
    Parse every entry of a JSON list.

    Raises:
        ServerError: INVALID_RESPONSE if ``entries`` is not a list or an
            entry lacks a field ``parse`` reads
    """
    if not isinstance(entries, list):
        raise invalid_response(path, f"expected a list, got {type(entries).__name__}")
    try:
        return [parse(entry) for entry in entries]
    except (KeyError, TypeError, AttributeError) as e:
        raise invalid_response(path, f"malformed entry ({e!r})") from e


def _error_details(response: httpx.Response) -> tuple[str, str]:
    """
    Extract code and message from an error body.

    The 2.0 API answers with ``{"error": {"message": ..., "detail": ...}}``,
    the 1.0 API with a plain-text reason. An empty body keeps the status.
    """
    code = f"HTTP_{response.status_code}"
    text = response.text.strip()
    if not text:
        return code, f"HTTP {response.status_code}"

    try:
        data = response.json()
    except ValueError:
        return code, text

    error = data.get("error") if isinstance(data, dict) else None
    if not isinstance(error, dict):
        return code, text

    message = error.get("message") or text
    if error.get("detail"):
        message = f"{message}: {error['detail']}"
    return error.get("code") or code, message


class HTTPTransport:
    """
    HTTP transport layer with basic authentication and retry logic.

    Handles:
    - HTTP basic authentication with username and API key
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        api_key: str,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.bitbucket.org")
            username: Bitbucket account name
            api_key: API key or app password for the account
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
        """
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            auth=httpx.BasicAuth(username, api_key),
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        json: Any = None,
        content: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Make a request with automatic retry.

        Exactly one of ``data`` (form-encoded), ``json`` or ``content``
        (plain text) should be given for requests that carry a body.

        Args:
            method: HTTP method (GET, HEAD, PUT, POST, DELETE)
            path: API path (e.g., "/2.0/repositories/owner")
            params: Query parameters
            data: Form fields
            json: JSON body
            content: Raw text body
            headers: Extra request headers

        Returns:
            The successful (< 400) response

        Raises:
            EnforcerError: On API errors
        """
        def make_request() -> httpx.Response:
            log_http_request(method, path, body=data or json or content)
            started = time.monotonic()
            response = self._client.request(
                method,
                path,
                params=params,
                data=data,
                json=json,
                content=content,
                headers=headers,
            )
            log_http_response(
                response.status_code, path, (time.monotonic() - started) * 1000
            )
            return response

        return self._execute_with_retry(make_request)

    def request_json(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        json: Any = None,
        content: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Make a request and decode its JSON body.

        Returns:
            Parsed JSON response, or None for an empty body

        Raises:
            ServerError: INVALID_RESPONSE if a successful body is not JSON
        """
        response = self.request(
            method,
            path,
            params=params,
            data=data,
            json=json,
            content=content,
            headers=headers,
        )
        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise invalid_response(
                path,
                f"body is not JSON ({response.headers.get('Content-Type', 'no content type')})",
                response.status_code,
            ) from e

    def _execute_with_retry(
        self, request_fn: Callable[[], httpx.Response]
    ) -> httpx.Response:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            request_fn: Function that makes the HTTP request

        Returns:
            The successful response

        Raises:
            EnforcerError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = request_fn()

                if response.status_code < 400:
                    return response

                error = self._parse_error_response(response)

                if not self._should_retry(response.status_code, attempt):
                    raise error

                last_error = error

                retry_after = response.headers.get("Retry-After")
                wait_time = self._get_backoff_time(attempt, retry_after)
                time.sleep(wait_time)

            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise ServerError("CONNECTION_ERROR", str(e)) from e

                last_error = e
                wait_time = self._get_backoff_time(attempt, None)
                time.sleep(wait_time)

        if last_error:
            if isinstance(last_error, EnforcerError):
                raise last_error
            raise ServerError("MAX_RETRIES_EXCEEDED", str(last_error))

        raise ServerError("UNKNOWN_ERROR", "Request failed with no error details")

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _get_backoff_time(
        self, attempt: int, retry_after: str | None
    ) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass  # Fall through to exponential backoff

        base_wait = self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        return min(wait_time, self.retry_config.max_backoff)

    def _parse_error_response(self, response: httpx.Response) -> EnforcerError:
        """
        Parse an error response into a typed exception.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate EnforcerError subclass
        """
        status_code = response.status_code
        code, message = _error_details(response)

        if status_code == 429:
            retry_after = response.headers.get("Retry-After", "")
            return RateLimitedError(
                code, message, int(retry_after) if retry_after.isdigit() else 60, status_code
            )

        error_class = _STATUS_ERRORS.get(
            status_code, ServerError if status_code >= 500 else ValidationError
        )
        return error_class(code, message, status_code)
