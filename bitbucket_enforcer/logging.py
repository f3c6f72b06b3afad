"""
Bitbucket Enforcer logging utilities.

Provides configurable logging for the enforcement loop and for HTTP
requests/responses. Ensures credentials (API keys, basic-auth headers)
are never logged.
"""

import logging
import re
from typing import Any

# Enforcer-specific loggers
_root_logger = logging.getLogger("bitbucket_enforcer")
_http_logger = logging.getLogger("bitbucket_enforcer.http")
_reconcile_logger = logging.getLogger("bitbucket_enforcer.reconcile")

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # HTTP basic auth header
    (re.compile(r"Basic\s+[A-Za-z0-9+/=]+"), "Basic [REDACTED]"),
    # Credentials embedded in a URL
    (re.compile(r"(https?://)[^/\s:@]+:[^/\s@]+@"), r"\1[REDACTED]@"),
    # Secret/token patterns
    (re.compile(r"(secret|token|password|api_key|apikey)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE), r"\1: [REDACTED]"),
]

_DEFAULT_SENSITIVE_KEYS = {"authorization", "password", "secret", "token", "api_key", "apikey"}


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    reconcile_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure Bitbucket Enforcer logging.

    Args:
        level: Default log level for all enforcer loggers (default: INFO)
        http_level: Log level for HTTP request/response logging (default: same as level)
        reconcile_level: Log level for per-facet reconciliation (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from bitbucket_enforcer.logging import configure_logging

        # Verbose mode
        configure_logging(level=logging.DEBUG)

        # Quiet HTTP, chatty reconciliation
        configure_logging(http_level=logging.WARNING, reconcile_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _root_logger.setLevel(level)
    _root_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)
    _reconcile_logger.setLevel(
        reconcile_level if reconcile_level is not None else level
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a Bitbucket Enforcer logger.

    Args:
        name: Logger name suffix (e.g., "http", "reconcile"). If None, returns the root enforcer logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _root_logger
    return logging.getLogger(f"bitbucket_enforcer.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask sensitive data in a string.

    Args:
        text: Text that may contain credentials

    Returns:
        Text with credentials replaced by redacted placeholders
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Set of keys to mask (default: authorization, password, secret, token, api_key)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _DEFAULT_SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        if key_lower in sensitive_keys or any(sk in key_lower for sk in sensitive_keys):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: Any = None,
) -> None:
    """
    Log an HTTP request at DEBUG level with sensitive data masked.

    Args:
        method: HTTP method (GET, PUT, etc.)
        url: Request URL
        headers: Request headers (optional)
        body: Request body, form fields or JSON (optional)
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {mask_sensitive_data(url)}"]

    if headers:
        log_parts.append(f"headers={safe_log_dict(headers)}")

    if isinstance(body, dict):
        log_parts.append(f"body={safe_log_dict(body)}")
    elif body:
        log_parts.append(f"body={mask_sensitive_data(str(body))}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    elapsed_ms: float | None = None,
) -> None:
    """
    Log an HTTP response at DEBUG level.

    Args:
        status_code: HTTP status code
        url: Request URL
        elapsed_ms: Request duration in milliseconds (optional)
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {mask_sensitive_data(url)}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    _http_logger.debug(" | ".join(log_parts))


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
]
