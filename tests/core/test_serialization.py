"""Tests for structured serialization of extraction payloads.

Tests:
- Byte budget is never exceeded, whatever the payload or budget
- Budget-capped marker when records are left out
- Full-fidelity rendering of small payloads
- Routing between the full and summary serializers
"""

import json

import pytest

from compliance_index.boundary.db.CRUD.source_document_crud import truncate_records
from compliance_index.core.document_indexing.configs import ExtractionBudget
from compliance_index.core.document_indexing.models import parse_extracted_data
from compliance_index.core.document_indexing.tasks.serialization_task import (
    format_record,
    payload_size,
    serialize_extracted_data,
    serialize_full_fidelity,
    serialize_summary,
)


def lab_payload(record_count: int) -> dict:
    """Lab EDD payload with `record_count` result rows."""
    return {
        "document_type": "Lab EDD",
        "permit_numbers": ["WV0001234", "WV0005678"],
        "states": ["WV"],
        "date_range": {"earliest": "2023-01-01", "latest": "2024-12-31"},
        "summary": "Quarterly lab results for outfalls 001 through 004.",
        "parameter_summary": [
            {"canonical_name": "pH", "sample_count": 812},
            {"canonical_name": "Iron, Total", "sample_count": 790},
            {"canonical_name": "Manganese, Total", "sample_count": 770},
        ],
        "total_rows": record_count,
        "records": [
            {
                "sample_date": "2024-01-01",
                "parameter": "Iron, Total",
                "value": 1.23,
                "unit": "mg/L",
                "outfall": f"{i % 4 + 1:03d}",
            }
            for i in range(record_count)
        ],
    }


class TestSummarySerializer:
    """Byte-budgeted serializer."""

    def test_large_lab_payload_stays_within_budget(self) -> None:
        """3 MB lab payload renders under the budget with a capped marker."""
        raw = lab_payload(40000)
        assert payload_size(raw) > 3_000_000

        loaded = truncate_records(raw, 20)
        text = serialize_summary(parse_extracted_data("lab_data", loaded), 1500)

        assert len(text.encode("utf-8")) <= 1500
        assert "(40000 records total, budget-capped)" in text
        assert "Permits: WV0001234, WV0005678" in text
        assert "Parameters Monitored:" in text

    @pytest.mark.parametrize("byte_budget", list(range(40, 2200, 37)))
    def test_output_never_exceeds_budget(self, byte_budget: int) -> None:
        """Output stays within every budget size."""
        data = parse_extracted_data("lab_data", truncate_records(lab_payload(500), 20))

        text = serialize_summary(data, byte_budget)

        assert len(text.encode("utf-8")) <= byte_budget

    def test_multibyte_text_counts_bytes(self) -> None:
        """Budget is measured in UTF-8 bytes, not characters."""
        data = parse_extracted_data(
            "lab_data",
            {
                "summary": "é" * 400,
                "records": [{"note": "µg/L " * 20} for _ in range(30)],
            },
        )

        text = serialize_summary(data, 600)

        assert len(text.encode("utf-8")) <= 600

    def test_header_before_records(self) -> None:
        """Header, date range and total rows precede sample records."""
        data = parse_extracted_data("lab_data", lab_payload(5))

        lines = serialize_summary(data, 1500).split("\n")

        assert lines[0] == "Document Type: Lab EDD"
        assert lines[1] == "Permits: WV0001234, WV0005678"
        assert lines[2] == "States: WV"
        assert lines[3] == "Date Range: 2023-01-01 to 2024-12-31"
        assert lines[4] == "Total Data Rows: 5"

    def test_no_marker_when_all_records_fit(self) -> None:
        """A payload that fits entirely gets no truncation note."""
        data = parse_extracted_data("lab_data", lab_payload(3))

        text = serialize_summary(data, 1500)

        assert "Sample Records (3 total):" in text
        assert "budget-capped" not in text

    def test_records_skipped_when_budget_mostly_used(self) -> None:
        """Sample records need at least 20% of the budget free."""
        data = parse_extracted_data(
            "lab_data",
            {"summary": "x" * 450, "records": [{"value": 1}]},
        )

        text = serialize_summary(data, 500)

        assert "Summary:" in text
        assert "Sample Records" not in text

    def test_single_permit_number_used_when_no_list(self) -> None:
        """Permits header falls back to permit_number."""
        data = parse_extracted_data("dmr", {"permit_number": "KY0012345"})

        assert serialize_summary(data, 1500) == "Permits: KY0012345"


class TestFullFidelitySerializer:
    """Unbounded serializer for small payloads."""

    def test_renders_all_sections(self) -> None:
        """Header, parameters and records appear in order."""
        data = parse_extracted_data(
            "npdes_permit",
            {
                "document_type": "NPDES Permit",
                "permit_number": "WV0001234",
                "states": ["WV"],
                "summary": "Coal preparation plant permit.",
                "parameter_summary": [{"canonical_name": "pH", "sample_count": 4}],
                "records": [{"outfall": "001", "parameter": "pH", "limit": "6-9"}],
            },
        )

        text = serialize_full_fidelity(data)

        assert text.split("\n")[:3] == [
            "Document Type: NPDES Permit",
            "Permit: WV0001234",
            "States: WV",
        ]
        assert "\nSummary: Coal preparation plant permit." in text
        assert "\nParameters:\n  pH: 4 samples" in text
        assert "\nData Records (1 total):\n  outfall: 001, parameter: pH, limit: 6-9" in text

    def test_sample_limit_with_remainder_note(self) -> None:
        """Only the first 50 records are rendered."""
        data = parse_extracted_data(
            "dmr",
            {"records": [{"row": i} for i in range(60)]},
        )

        text = serialize_full_fidelity(data, sample_limit=50)

        assert "  row: 49" in text
        assert "  row: 50" not in text
        assert text.endswith("  ... and 10 more records")

    def test_remainder_counts_records_dropped_at_load(self) -> None:
        """Records truncated when loading still count toward the total."""
        data = parse_extracted_data("dmr", truncate_records({"records": [{"row": i} for i in range(100)]}, 20))

        text = serialize_full_fidelity(data)

        assert "Data Records (100 total):" in text
        assert text.endswith("  ... and 80 more records")


class TestFormatRecord:
    """Record line rendering."""

    def test_skips_empty_values(self) -> None:
        """None and empty strings are omitted."""
        assert format_record({"a": 1, "b": None, "c": "", "d": "x"}) == "a: 1, d: x"

    def test_booleans_and_nested_values(self) -> None:
        """Booleans render lowercase and nested values as JSON."""
        assert format_record({"flag": True, "tags": ["a"]}) == 'flag: true, tags: ["a"]'


class TestSerializeExtractedData:
    """Routing between serializers."""

    def test_small_permit_uses_full_fidelity(self) -> None:
        """Small payloads keep every field."""
        raw = {"permit_number": "WV0001234", "parameter_summary": [{"canonical_name": "pH", "sample_count": 1}]}

        pages = serialize_extracted_data(raw, "npdes_permit", ExtractionBudget())

        assert len(pages) == 1
        assert pages[0].page == 0
        assert "Parameters:" in pages[0].text
        assert "Parameters Monitored:" not in pages[0].text

    def test_large_payload_uses_summary(self) -> None:
        """Payloads above the threshold are summarized."""
        raw = {"document_type": "DMR", "records": [{"value": "x" * 100} for _ in range(100)]}
        budget = ExtractionBudget()
        assert len(json.dumps(raw)) > budget.large_doc_threshold

        pages = serialize_extracted_data(raw, "dmr", budget)

        assert len(pages[0].text.encode("utf-8")) <= budget.summary_byte_budget
        assert "Sample Records" in pages[0].text

    def test_lab_data_always_summarized(self) -> None:
        """Lab data takes the summary path regardless of size."""
        raw = {"parameter_summary": [{"canonical_name": "pH", "sample_count": 2}]}

        pages = serialize_extracted_data(raw, "lab_data", ExtractionBudget())

        assert "Parameters Monitored:" in pages[0].text
