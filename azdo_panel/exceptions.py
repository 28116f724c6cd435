"""azdo-panel exception classes."""


class AzureDevOpsError(Exception):
    """Base exception for all azdo-panel errors."""

    def __init__(
        self, code: str, message: str, status_code: int | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"[{code}] {message}")


class ConfigurationError(AzureDevOpsError):
    """Raised when panel configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class ValidationError(AzureDevOpsError):
    """Raised on invalid input (blank credentials, unknown clone kind, 4xx)."""

    pass


class AuthenticationError(AzureDevOpsError):
    """Raised when the access token is rejected."""

    pass


class AuthorizationError(AzureDevOpsError):
    """Raised when access is denied."""

    pass


class NotFoundError(AzureDevOpsError):
    """Raised when an organization or project is not found."""

    pass


class RateLimitedError(AzureDevOpsError):
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


class ServerError(AzureDevOpsError):
    """Raised on server errors (5xx), network failures and unreadable bodies."""

    pass


class ClipboardError(AzureDevOpsError):
    """Raised when the system clipboard cannot be written."""

    def __init__(self, message: str) -> None:
        super().__init__("CLIPBOARD_ERROR", message)
