"""
Error taxonomy for invoice analysis.

Each error carries the stderr prefix and process exit code the CLI reports it
with, plus a context dict for structured logging.
"""

from typing import Any, Dict, Optional


class InvoiceAnalysisError(Exception):
    """
    Base exception for every failure the CLI reports.

    Attributes:
        message: Human-readable description of the failure.
        context: Additional data for debugging (optional).
    """

    prefix = "Error"
    exit_code = 1

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "exit_code": self.exit_code,
            "context": self.context,
        }

    def describe(self) -> str:
        """Single diagnostic line written to standard error."""
        return f"{self.prefix}: {self.message}"


class ConfigError(InvoiceAnalysisError):
    """Missing or blank credentials. Raised before any network call."""

    prefix = "Configuration error"
    exit_code = 2


class FileError(InvoiceAnalysisError):
    """The invoice file could not be opened or read."""

    prefix = "File error"
    exit_code = 3

    def __init__(self, message: str, file_path: str, context: Optional[Dict[str, Any]] = None):
        self.file_path = file_path
        super().__init__(message, {"file_path": file_path, **(context or {})})


class RemoteError(InvoiceAnalysisError):
    """
    The Document Intelligence service rejected the request or the operation failed.

    Attributes:
        status_code: HTTP status returned by the service, or None for transport
            failures and poll timeouts.
        retryable: True when the failure is transient (5xx or no response).
        retries_exhausted: True when the retry budget was spent on this error.
    """

    prefix = "Request failed"
    exit_code = 4

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retryable: bool = False,
        retries_exhausted: bool = False,
        attempts: int = 1,
    ):
        self.status_code = status_code
        self.retryable = retryable
        self.retries_exhausted = retries_exhausted
        self.attempts = attempts
        super().__init__(
            message,
            {
                "status_code": status_code,
                "retryable": retryable,
                "retries_exhausted": retries_exhausted,
                "attempts": attempts,
            },
        )
        if retryable:
            self.prefix = "Service error (retries exhausted)"
            self.exit_code = 5

    def describe(self) -> str:
        if self.status_code is not None:
            return f"{self.prefix}: [{self.status_code}] {self.message}"
        return f"{self.prefix}: {self.message}"


class UnexpectedError(InvoiceAnalysisError):
    """Wraps any exception that is not part of the taxonomy above."""

    prefix = "Unexpected error"
    exit_code = 1

    @classmethod
    def wrap(cls, original_exception: Exception) -> "UnexpectedError":
        return cls(
            f"{type(original_exception).__name__}: {original_exception}",
            {
                "exception_type": type(original_exception).__name__,
                "exception_message": str(original_exception),
            },
        )
