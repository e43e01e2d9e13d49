"""
Retry policy for Document Intelligence submission and polling.

Mirrors the exponential mode of azure-core's RetryPolicy, but is applied by
the analysis client itself so the cadence is explicit and testable.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from azure.core.exceptions import (
    HttpResponseError,
    ServiceRequestError,
    ServiceResponseError,
)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff: initial_delay, doubled per retry, capped at max_delay.

    Args:
        initial_delay: Seconds to wait before the first retry (default: 1)
        max_delay: Upper bound for any single wait (default: 10)
        max_retries: Retries allowed per analyze call (default: 4)
    """

    initial_delay: float = 1.0
    max_delay: float = 10.0
    max_retries: int = 4

    def delay_for(self, retry_number: int) -> float:
        """Backoff before retry `retry_number` (1-based)."""
        if retry_number < 1:
            raise ValueError("retry_number starts at 1")
        return min(self.max_delay, self.initial_delay * (2 ** (retry_number - 1)))

    def delays(self) -> Iterator[float]:
        for retry_number in range(1, self.max_retries + 1):
            yield self.delay_for(retry_number)


def status_code_of(error: Exception) -> Optional[int]:
    return getattr(error, "status_code", None)


def is_retryable(error: Exception) -> bool:
    """
    5xx responses and failures with no response at all are transient.
    Anything the service answered with a status below 500 is not, nor are
    decode errors raised without a response.
    """
    if isinstance(error, (ServiceRequestError, ServiceResponseError)):
        return True
    if isinstance(error, HttpResponseError):
        status = status_code_of(error)
        return status is not None and status >= 500
    return False
