"""
Metadata chunk builder.

Every indexed document gets chunk 0 built from fields already known
without extraction, so it stays retrievable even when extraction fails.
"""

from ..models import METADATA_SECTION, Chunk, SourceDocument

METADATA_INDEX = 0
METADATA_PAGE = 0


def build_metadata_text(doc: SourceDocument) -> str:
    """Render the metadata lines of a source document."""
    lines = [
        f"File: {doc.file_name}",
        f"Category: {doc.file_category}",
    ]
    if doc.state_code:
        lines.append(f"State: {doc.state_code}")

    data = doc.typed_extracted_data()
    if data is not None:
        optional = (
            ("Permit", data.permit_number),
            ("Type", data.document_type),
            ("State", data.state),
            ("Effective", data.effective_date),
            ("Expires", data.expiration_date),
            ("Summary", data.summary),
            ("Outfalls", data.outfall_count),
            ("Limits", data.limit_count),
            ("Permits", ", ".join(data.permit_numbers) if data.permit_numbers else None),
            ("Total Rows", data.total_rows),
        )
        for label, value in optional:
            if value:
                lines.append(f"{label}: {value}")

    return "\n".join(lines)


def build_metadata_chunk(doc: SourceDocument) -> Chunk:
    """
    Build the index-0 metadata chunk.

    Args:
        doc: Source document with extracted_data loaded (may be None)

    Returns:
        Chunk: index 0, page 0, section "metadata"
    """
    return Chunk(
        index=METADATA_INDEX,
        text=build_metadata_text(doc),
        source_page=METADATA_PAGE,
        source_section=METADATA_SECTION,
    )
