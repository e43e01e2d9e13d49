import time
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from azure.ai.documentintelligence import DocumentIntelligenceClient
from azure.core.credentials import AzureKeyCredential
from azure.core.exceptions import (
    HttpResponseError,
    ServiceRequestError,
    ServiceResponseError,
)
from loguru import logger

from ..core.exceptions import ConfigError, FileError, RemoteError
from ..core.logging import SdkTraceSink
from ..models.invoice import AnalysisRequest, AnalysisResult
from .retry import RetryPolicy, is_retryable, status_code_of

TRANSIENT_ERRORS = (HttpResponseError, ServiceRequestError, ServiceResponseError)


class AnalysisState(str, Enum):
    IDLE = "idle"
    SUBMITTED = "submitted"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _error_message(error: Exception) -> str:
    """One line: the service's error message, else the first line of the SDK's."""
    odata_error = getattr(error, "error", None)
    message = getattr(odata_error, "message", None) or getattr(error, "message", None) or str(error)
    lines = str(message).strip().splitlines()
    return lines[0] if lines else type(error).__name__


def _redact_endpoint(endpoint: str) -> str:
    return endpoint[:50] + "..." if len(endpoint) > 50 else endpoint


class InvoiceAnalysisClient:
    """
    Runs the prebuilt-invoice model against a local file.

    Submission returns an operation handle (LROPoller); this class owns the
    poll loop and the retry loop around both submission and polling. The
    underlying SDK client is built with its own retries disabled.

    Usage:
        with InvoiceAnalysisClient.configure(endpoint, key) as client:
            result = client.analyze("invoice.pdf")
    """

    def __init__(
        self,
        document_client: Any,
        *,
        retry_policy: Optional[RetryPolicy] = None,
        poll_interval: float = 1.0,
        poll_timeout: float = 300.0,
        trace_sink: Optional[SdkTraceSink] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = document_client
        self.retry_policy = retry_policy or RetryPolicy()
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.trace_sink = trace_sink
        self._sleep = sleep
        self._clock = clock
        self.state = AnalysisState.IDLE

    @classmethod
    def configure(cls, endpoint: Optional[str], key: Optional[str], **options) -> "InvoiceAnalysisClient":
        """
        Validate credentials and build the SDK client. Makes no network call.

        Raises:
            ConfigError: If endpoint or key is missing or blank
        """
        missing = [
            name for name, value in (("endpoint", endpoint), ("key", key))
            if value is None or not value.strip()
        ]
        if missing:
            raise ConfigError(
                "Document Intelligence endpoint or key is missing in configuration.",
                {"missing": missing},
            )

        logger.info(
            "Configuring Azure Document Intelligence client",
            endpoint=_redact_endpoint(endpoint.strip()),
        )

        document_client = DocumentIntelligenceClient(
            endpoint=endpoint.strip(),
            credential=AzureKeyCredential(key.strip()),
            retry_total=0,
        )
        return cls(document_client, **options)

    def __enter__(self) -> "InvoiceAnalysisClient":
        if self.trace_sink is not None:
            self.trace_sink.attach()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self.trace_sink is not None:
            self.trace_sink.detach()
        close = getattr(self._client, "close", None)
        if callable(close):
            close()

    def analyze(self, file_path: str | Path) -> AnalysisResult:
        """
        Analyze one invoice file with the prebuilt-invoice model.

        Raises:
            FileError: The file is missing or unreadable
            RemoteError: The service rejected the request, the operation
                failed, timed out, or transient failures outlasted the retry budget
        """
        request = AnalysisRequest(file_path=str(file_path))
        self.state = AnalysisState.IDLE

        try:
            body = self._read_file(request.file_path)
            payload = self._run_operation(request, body)
            result = AnalysisResult.from_payload(payload)
        except Exception:
            self._transition(AnalysisState.FAILED)
            raise

        self._transition(AnalysisState.SUCCEEDED)

        logger.info(
            "Invoice analysis succeeded",
            model_id=result.model_id,
            pages=len(result.pages),
            fields=len(result.fields),
            confidence=result.document_confidence,
        )
        return result

    def _read_file(self, file_path: str) -> bytes:
        try:
            with open(file_path, "rb") as f:
                body = f.read()
        except OSError as e:
            raise FileError(f"{e.strerror or e}: '{file_path}'", file_path) from e

        logger.info("Analyzing document", file_path=file_path, size_bytes=len(body))
        return body

    def _run_operation(self, request: AnalysisRequest, body: bytes) -> dict:
        retries = 0
        poller = None
        continuation_token = None

        while True:
            try:
                if poller is None:
                    poller = self._submit(request, body, continuation_token)
                    if continuation_token is None:
                        continuation_token = poller.continuation_token()
                result = self._wait(poller)
                return result.as_dict() if hasattr(result, "as_dict") else dict(result)

            except TRANSIENT_ERRORS as e:
                status = status_code_of(e)
                message = _error_message(e)

                if not is_retryable(e):
                    if status is not None and status < 400:
                        # The status belongs to the poll response, not the failure
                        status = None
                        message = f"Analysis operation failed: {message}"
                    logger.error("Document Intelligence request failed", status_code=status, error=message)
                    raise RemoteError(message, status_code=status, attempts=retries + 1) from e

                if retries >= self.retry_policy.max_retries:
                    logger.error(
                        "Document Intelligence retries exhausted",
                        status_code=status,
                        retries=retries,
                        error=message,
                    )
                    raise RemoteError(
                        message,
                        status_code=status,
                        retryable=True,
                        retries_exhausted=True,
                        attempts=retries + 1,
                    ) from e

                retries += 1
                delay = self.retry_policy.delay_for(retries)
                logger.warning(
                    "Transient Document Intelligence error, retrying",
                    status_code=status,
                    retry=retries,
                    max_retries=self.retry_policy.max_retries,
                    delay_seconds=delay,
                    resume=continuation_token is not None,
                )
                self._sleep(delay)
                # Resume the same remote operation once one exists
                poller = None

    def _submit(self, request: AnalysisRequest, body: bytes, continuation_token: Optional[str]):
        kwargs = {"polling_interval": self.poll_interval}
        if continuation_token is not None:
            kwargs["continuation_token"] = continuation_token

        poller = self._client.begin_analyze_document(
            request.model_id,
            body=body,
            content_type="application/octet-stream",
            **kwargs,
        )
        self._transition(AnalysisState.SUBMITTED)
        return poller

    def _wait(self, poller):
        self._transition(AnalysisState.POLLING)
        deadline = self._clock() + self.poll_timeout

        while not poller.done():
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise RemoteError(
                    f"Analysis did not complete within {self.poll_timeout:g} seconds"
                )
            poller.wait(timeout=min(self.poll_interval, remaining))

        return poller.result()

    def _transition(self, state: AnalysisState) -> None:
        if state != self.state:
            logger.debug("Analysis state change", previous=self.state.value, state=state.value)
        self.state = state
