"""Bitbucket Enforcer exception classes."""


class EnforcerError(Exception):
    """Base exception for all Bitbucket Enforcer errors."""

    def __init__(
        self, code: str, message: str, status_code: int | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"[{code}] {message}")


class ConfigurationError(EnforcerError):
    """Raised when process configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class PolicyError(EnforcerError):
    """Raised when a policy document cannot be loaded or parsed."""

    def __init__(self, policy_name: str, message: str) -> None:
        super().__init__("POLICY_ERROR", message)
        self.policy_name = policy_name


class AuthenticationError(EnforcerError):
    """Raised when the API rejects the credentials."""

    pass


class AuthorizationError(EnforcerError):
    """Raised when access is denied."""

    pass


class NotFoundError(EnforcerError):
    """Raised when a resource is not found."""

    pass


class ConflictError(EnforcerError):
    """Raised on conflicts (restriction already exists, etc.)."""

    pass


class RateLimitedError(EnforcerError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        status_code: int | None = 429,
    ) -> None:
        super().__init__(code, message, status_code)
        self.retry_after = retry_after


class ValidationError(EnforcerError):
    """Raised on validation errors, remote or local."""

    pass


class ServerError(EnforcerError):
    """Raised on server errors (5xx) and connection failures."""

    pass
