"""
Logging setup.

Application logs go through loguru to stderr. The Azure SDK logs through the
standard library, so its trace is echoed by an SdkTraceSink that the analysis
client attaches for the lifetime of a run.
"""

import logging
import sys
from typing import Optional, TextIO

from loguru import logger

LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level> | {extra}"
)


def setup_logging(level: str = "INFO"):
    """Replace loguru's default handler with a stderr sink at `level`."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT, backtrace=False, diagnose=False)
    return logger


class SdkTraceSink:
    """
    Echoes the Azure SDK's event trace while attached.

    Each record is written as ``<logger name> [<LEVEL>]: <message>``.

    Usage:
        sink = SdkTraceSink()
        sink.attach()
        ...
        sink.detach()
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        level: int = logging.INFO,
        logger_name: str = "azure",
    ):
        self.stream = stream
        self.level = level
        self.logger_name = logger_name
        self._handler: Optional[logging.Handler] = None
        self._previous_level: Optional[int] = None

    @property
    def attached(self) -> bool:
        return self._handler is not None

    def attach(self) -> None:
        if self._handler is not None:
            return

        # Resolve at attach time so a replaced sys.stdout is honoured
        handler = logging.StreamHandler(self.stream or sys.stdout)
        handler.setLevel(self.level)
        handler.setFormatter(logging.Formatter("%(name)s [%(levelname)s]: %(message)s"))

        sdk_logger = logging.getLogger(self.logger_name)
        self._previous_level = sdk_logger.level
        sdk_logger.setLevel(self.level)
        sdk_logger.addHandler(handler)
        self._handler = handler
        logger.debug("SDK trace sink attached", logger_name=self.logger_name)

    def detach(self) -> None:
        if self._handler is None:
            return

        sdk_logger = logging.getLogger(self.logger_name)
        self._handler.flush()
        sdk_logger.removeHandler(self._handler)
        if self._previous_level is not None:
            sdk_logger.setLevel(self._previous_level)
        self._handler = None
        self._previous_level = None
        logger.debug("SDK trace sink detached", logger_name=self.logger_name)

    def __enter__(self) -> "SdkTraceSink":
        self.attach()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.detach()
