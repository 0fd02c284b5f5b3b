"""
Source document snapshot used by the pipeline.

Decoupled from the ORM row so stages can be tested without a database.

Dependencies: pydantic
System role: Read model of the document being indexed
"""

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict

from compliance_index.core.document_indexing.models.extracted_data import (
    PERMIT_CATEGORY,
    ExtractedData,
    parse_extracted_data,
)

INDEXABLE_STATUSES = frozenset({"parsed", "embedded"})


class SourceDocument(BaseModel):
    """Queue entry fields needed for indexing."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    storage_bucket: str
    storage_path: str
    file_name: str
    file_category: str
    state_code: str | None = None
    status: str
    uploaded_by: uuid.UUID | None = None
    document_id: uuid.UUID | None = None
    extracted_data: dict[str, Any] | None = None

    @property
    def is_pdf(self) -> bool:
        """PDF-class documents get page-aware text extraction."""
        return self.file_name.lower().endswith(".pdf") or self.file_category == PERMIT_CATEGORY

    @property
    def is_indexable(self) -> bool:
        return self.status in INDEXABLE_STATUSES

    @property
    def document_key(self) -> str:
        """Key chunks are grouped under: canonical document id, else queue id."""
        return str(self.document_id or self.id)

    def typed_extracted_data(self) -> ExtractedData | None:
        """Category-specific view of extracted_data."""
        if self.extracted_data is None:
            return None
        return parse_extracted_data(self.file_category, self.extracted_data)
