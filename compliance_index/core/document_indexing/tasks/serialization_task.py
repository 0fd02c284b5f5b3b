"""
Structured serialization of extraction payloads.

Renders extracted_data as plain text for chunking. Small payloads get the
full-fidelity renderer; large payloads and tabular lab data get the
byte-budgeted summary renderer, which guarantees header fields, summary
and parameter names space before any raw data rows.

Dependencies: json, compliance_index.core.document_indexing.models
System role: Non-PDF content source for the indexing pipeline
"""

import json
import logging
from typing import Any

from ..configs import ExtractionBudget
from ..models import ExtractedData, PageText, parse_extracted_data

logger = logging.getLogger(__name__)

SERIALIZED_PAGE = 0


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def format_record(record: dict[str, Any]) -> str:
    """Render one data record as `key: value` pairs, skipping empty values."""
    return ", ".join(
        f"{key}: {_format_value(value)}"
        for key, value in record.items()
        if value is not None and value != ""
    )


def _permits_label(data: ExtractedData) -> str | None:
    if data.permit_numbers:
        return ", ".join(data.permit_numbers)
    return data.permit_number


def _date_range_line(data: ExtractedData) -> str | None:
    if data.date_range is None:
        return None
    earliest = data.date_range.earliest or "?"
    latest = data.date_range.latest or "?"
    return f"Date Range: {earliest} to {latest}"


def payload_size(raw: dict[str, Any]) -> int:
    """UTF-8 byte length of the compact JSON encoding of a payload."""
    encoded = json.dumps(raw, separators=(",", ":"), ensure_ascii=False, default=str)
    return len(encoded.encode("utf-8"))


def serialize_full_fidelity(data: ExtractedData, sample_limit: int = 50) -> str:
    """
    Render a small payload without a byte budget.

    Args:
        data: Typed extraction payload
        sample_limit: Maximum data records to render

    Returns:
        str: Newline-joined text
    """
    lines: list[str] = []

    if data.document_type:
        lines.append(f"Document Type: {data.document_type}")
    if data.permit_numbers:
        lines.append(f"Permits: {', '.join(data.permit_numbers)}")
    if data.permit_number:
        lines.append(f"Permit: {data.permit_number}")
    if data.states:
        lines.append(f"States: {', '.join(data.states)}")
    date_line = _date_range_line(data)
    if date_line:
        lines.append(date_line)
    if data.summary:
        lines.append(f"\nSummary: {data.summary}")

    if data.parameter_summary:
        lines.append("\nParameters:")
        for param in data.parameter_summary:
            lines.append(f"  {param.canonical_name}: {param.sample_count} samples")

    records = data.records or []
    if records:
        total = data.record_count
        lines.append(f"\nData Records ({total} total):")
        shown = records[:sample_limit]
        for record in shown:
            lines.append(f"  {format_record(record)}")
        if total > len(shown):
            lines.append(f"  ... and {total - len(shown)} more records")

    return "\n".join(lines)


class _BudgetedLines:
    """Line accumulator that refuses lines past a UTF-8 byte budget."""

    def __init__(self, budget: int) -> None:
        self.budget = budget
        self.used = 0
        self.lines: list[str] = []

    @staticmethod
    def cost(line: str) -> int:
        # One byte for the joining newline.
        return len(line.encode("utf-8")) + 1

    def fits(self, line: str) -> bool:
        return self.used + self.cost(line) <= self.budget

    def add(self, line: str) -> bool:
        if not self.fits(line):
            return False
        self.used += self.cost(line)
        self.lines.append(line)
        return True

    def pop(self) -> None:
        self.used -= self.cost(self.lines.pop())

    def text(self) -> str:
        return "\n".join(self.lines)


def serialize_summary(
    data: ExtractedData,
    byte_budget: int,
    records_min_free: float = 0.2,
) -> str:
    """
    Render a payload under a strict byte budget.

    Priority: header fields and date range, total rows, summary, parameter
    list, then sample records one at a time only while at least
    `records_min_free` of the budget remains unused. When records are left
    out a "(N records total, budget-capped)" note is appended.

    Args:
        data: Typed extraction payload
        byte_budget: Maximum UTF-8 bytes of the returned text
        records_min_free: Share of the budget that must be free before records

    Returns:
        str: Text whose UTF-8 length never exceeds byte_budget
    """
    out = _BudgetedLines(byte_budget)

    header = (
        ("Document Type", data.document_type),
        ("Permits", _permits_label(data)),
        ("States", ", ".join(data.states) if data.states else None),
    )
    for label, value in header:
        if value:
            out.add(f"{label}: {value}")

    date_line = _date_range_line(data)
    if date_line:
        out.add(date_line)

    if data.total_rows:
        out.add(f"Total Data Rows: {data.total_rows}")

    if data.summary:
        out.add(f"\nSummary: {data.summary}")

    if data.parameter_summary and out.add("\nParameters Monitored:"):
        for param in data.parameter_summary:
            if not out.add(f"  {param.canonical_name}: {param.sample_count} samples"):
                break

    records = data.records or []
    if records and out.used <= byte_budget * (1 - records_min_free):
        total = data.record_count
        if out.add(f"\nSample Records ({total} total):"):
            added = 0
            for record in records:
                if not out.add(f"  {format_record(record)}"):
                    break
                added += 1

            if added < total:
                marker = f"  ... ({total} records total, budget-capped)"
                while not out.fits(marker) and added > 0:
                    out.pop()
                    added -= 1
                out.add(marker)

    return out.text()


def serialize_extracted_data(
    raw: dict[str, Any],
    category: str,
    budget: ExtractionBudget,
) -> list[PageText]:
    """
    Serialize extracted_data into a single unpaginated page.

    Payloads whose compact JSON exceeds large_doc_threshold bytes, and lab
    data of any size, use the summary serializer.

    Args:
        raw: extracted_data payload
        category: Source document file_category
        budget: Serializer thresholds and byte budget

    Returns:
        list[PageText]: One page numbered 0
    """
    data = parse_extracted_data(category, raw)
    size = payload_size(raw)

    if data.always_summarize or size > budget.large_doc_threshold:
        text = serialize_summary(data, budget.summary_byte_budget, budget.summary_records_min_free)
        mode = "summary"
    else:
        text = serialize_full_fidelity(data, budget.sample_record_limit)
        mode = "full"

    logger.info(
        "%s:serialize_extracted_data - %s serializer",
        __name__,
        mode,
        extra={
            "category": category,
            "json_bytes": size,
            "text_chars": len(text),
            "budget": budget.summary_byte_budget,
        },
    )
    return [PageText(page=SERIALIZED_PAGE, text=text)]
