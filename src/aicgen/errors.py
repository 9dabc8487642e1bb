"""Error taxonomy for project analysis.

Static analysis and file sampling degrade locally and never raise these.
Provider calls, the resilience layer and the response validator do, and the
pipeline re-raises them at its boundary after logging.
"""


class AicgenError(Exception):
    """Base class for all analysis errors."""

    kind = "error"


class ProjectAccessError(AicgenError):
    """Raised when the analysis root cannot be read at all."""

    kind = "project_access"

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        self.message = message or f"Cannot read project directory: {path}"
        super().__init__(self.message)


class ProviderError(AicgenError):
    """Raised for network or HTTP failures talking to an AI provider."""

    kind = "provider"

    def __init__(
        self,
        message: str,
        provider: str,
        status: int | None = None,
    ) -> None:
        self.message = message
        self.provider = provider
        self.status = status
        super().__init__(message)

    def __str__(self) -> str:
        if self.status is not None:
            return f"[{self.provider}] {self.message} (status {self.status})"
        return f"[{self.provider}] {self.message}"


class ResponseShapeError(ProviderError):
    """Raised when a provider answers 2xx but the expected text field is missing."""

    kind = "response_shape"


class InvalidCredentialsError(ProviderError):
    """Raised on 401/403 responses or when no key is configured for a provider."""

    kind = "invalid_credentials"


class RateLimitError(ProviderError):
    """Raised on 429 responses.

    Attributes:
        retry_after: Seconds the provider asked us to wait, if it said so
    """

    kind = "rate_limit"

    def __init__(
        self,
        message: str,
        provider: str,
        status: int | None = 429,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, provider, status)
        self.retry_after = retry_after


class OperationTimeoutError(AicgenError, TimeoutError):
    """Raised when an operation exceeds its deadline."""

    kind = "timeout"

    def __init__(self, timeout_ms: int, message: str | None = None) -> None:
        self.timeout_ms = timeout_ms
        self.message = message or f"Operation timed out after {timeout_ms}ms"
        super().__init__(self.message)


class AbortError(AicgenError):
    """Raised by an operation that observed its abort signal."""

    kind = "aborted"


class ValidationError(AicgenError):
    """Raised when a provider response cannot be parsed or a field is invalid."""

    kind = "validation"

    def __init__(self, field: str, message: str, raw: str | None = None) -> None:
        self.field = field
        self.message = message
        self.raw = raw
        super().__init__(f"{field}: {message}")


class ValidationErrors(AicgenError):
    """Raised with every schema violation found in one parsed response."""

    kind = "validation_multi"

    def __init__(self, errors: list[ValidationError]) -> None:
        self.errors = errors
        details = "; ".join(str(error) for error in errors)
        super().__init__(f"{len(errors)} validation error(s): {details}")

    @property
    def fields(self) -> list[str]:
        """Names of the fields that failed validation."""
        return [error.field for error in self.errors]
