"""
Output of an analysis run: the timestamped JSON file and the console summary.
"""

import json
import time
from pathlib import Path
from typing import Optional

from loguru import logger

from ..models.invoice import AnalysisResult
from .invoice_types import InvoiceHeadline

OUTPUT_FILE_TEMPLATE = "invoice_analysis_result_{timestamp}.json"


def fields_json(result: AnalysisResult) -> str:
    """First document's field mapping, pretty-printed, nulls omitted."""
    return json.dumps(result.fields_dict(), indent=2, ensure_ascii=False)


def write_result_file(
    result: AnalysisResult,
    output_dir: str | Path = ".",
    timestamp: Optional[int] = None,
) -> Path:
    if timestamp is None:
        timestamp = time.time_ns()

    output_path = Path(output_dir) / OUTPUT_FILE_TEMPLATE.format(timestamp=timestamp)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(fields_json(result), encoding="utf-8")

    logger.info("Wrote analysis result", path=str(output_path), fields=len(result.fields))
    return output_path


def _number(value: float | None) -> str:
    return "?" if value is None else f"{value:g}"


def render_summary(result: AnalysisResult) -> str:
    lines = ["Analysis Result JSON:", fields_json(result)]

    lines.append(f"Invoice analysis completed. Model ID: {result.model_id}")
    for page in result.pages:
        lines.append(f"Page {page.page_number}: {_number(page.width)}×{_number(page.height)} {page.unit or ''}".rstrip())

    for kv in result.key_value_pairs:
        value = kv.value.content if kv.value is not None else ""
        lines.append(f"  Field '{kv.key.content}' = '{value}'")

    headline = InvoiceHeadline.from_fields(result.fields, result.document_confidence)
    lines.append("")
    lines.append(f"Vendor: {headline.vendor or 'N/A'}")
    lines.append(f"Invoice #: {headline.invoice_number or 'N/A'}")
    lines.append(f"Date: {headline.invoice_date or 'N/A'}")
    total = "N/A" if headline.total is None else f"{headline.currency or ''} {headline.total:,.2f}".strip()
    lines.append(f"Total: {total}")
    lines.append(f"Customer: {headline.customer or 'N/A'}")
    lines.append(f"Line items: {headline.line_items}")
    if result.document_count > 1:
        lines.append(f"Note: {result.document_count - 1} additional document(s) in the file were not included")

    return "\n".join(lines)
