#!/usr/bin/env python3
"""
Invoice Data Extractor - command-line entry point

Sends one invoice to the Azure Document Intelligence prebuilt-invoice model,
writes the extracted fields to invoice_analysis_result_<timestamp>.json and
prints a summary.

Usage:
    python -m src.cli path/to/invoice.pdf
    invoice-extract path/to/invoice.pdf --output-dir ./results
"""

import argparse
import sys
import traceback
from typing import Callable, Optional, Sequence

from loguru import logger
from pydantic import ValidationError

from .core.config import Settings
from .core.exceptions import ConfigError, InvoiceAnalysisError, UnexpectedError
from .core.logging import SdkTraceSink, setup_logging
from .services.form_recognizer import InvoiceAnalysisClient
from .services.result_writer import render_summary, write_result_file

DEFAULT_INVOICE_PATH = "documents/coyote-1line.pdf"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Extract invoice fields with the Azure Document Intelligence prebuilt-invoice model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration (appsettings.json, appsettings.Development.json, .env or environment):
  DocumentIntelligence.Endpoint  (env: DOCUMENTINTELLIGENCE__ENDPOINT)
  DocumentIntelligence.Key       (env: DOCUMENTINTELLIGENCE__KEY)
        """,
    )
    parser.add_argument(
        "file",
        nargs="?",
        default=DEFAULT_INVOICE_PATH,
        help=f"Invoice file to analyze (default: {DEFAULT_INVOICE_PATH})",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for the result JSON (default: OUTPUT_DIR setting, else current directory)",
    )
    return parser.parse_args(argv)


def main(
    argv: Optional[Sequence[str]] = None,
    app_settings: Optional[Settings] = None,
    client_factory: Callable[..., InvoiceAnalysisClient] = InvoiceAnalysisClient.configure,
) -> int:
    """Run one analysis. Returns the process exit code."""
    args = parse_args(argv)

    try:
        try:
            cfg = app_settings if app_settings is not None else Settings()
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e.error_count()} error(s)", {"errors": e.errors()}) from e

        setup_logging(cfg.log_level)
        trace_sink = SdkTraceSink() if cfg.sdk_trace else None

        client = client_factory(
            cfg.az_di_endpoint,
            cfg.az_di_api_key,
            poll_interval=cfg.poll_interval,
            poll_timeout=cfg.poll_timeout,
            trace_sink=trace_sink,
        )
        with client:
            result = client.analyze(args.file)

        write_result_file(result, args.output_dir or cfg.output_dir)
        print(render_summary(result))
        return 0

    except InvoiceAnalysisError as e:
        logger.debug("Analysis aborted", **e.to_dict())
        print(e.describe(), file=sys.stderr)
        return e.exit_code

    except Exception as e:
        error = UnexpectedError.wrap(e)
        logger.opt(exception=e).debug("Unhandled exception")
        print(f"{error.prefix}: {traceback.format_exc().rstrip()}", file=sys.stderr)
        return error.exit_code


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
