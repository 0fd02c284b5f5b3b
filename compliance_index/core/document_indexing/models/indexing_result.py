"""
Indexing result model.

Outcome of one pipeline run, including whether the chunk cap truncated
the document.

Dependencies: pydantic
System role: Return type for IndexingPipeline.run()
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field


class IndexingResult(BaseModel):
    """Result of indexing one source document."""

    queue_id: uuid.UUID = Field(description="Source queue entry id")
    document_id: uuid.UUID | None = Field(description="Canonical document id, if linked")
    chunk_count: int = Field(description="Chunks persisted")
    page_count: int = Field(description="Distinct pages routed to the chunker")
    truncated_for_embedding: bool = Field(default=False)
    precap_chunk_count: int = Field(description="Chunks built before the cap")
    max_chunks_per_doc: int = Field(description="Configured cap")
    content_strategy: str | None = Field(default=None, description="Strategy that produced pages")
    processing_time_ms: float = Field(default=0.0)

    def to_response(self) -> dict[str, Any]:
        """Build the HTTP success body."""
        body: dict[str, Any] = {
            "success": True,
            "documentId": str(self.document_id) if self.document_id else None,
            "chunkCount": self.chunk_count,
            "pageCount": self.page_count,
        }
        if self.truncated_for_embedding:
            body["truncated_for_embedding"] = True
            body["precap_chunk_count"] = self.precap_chunk_count
        body["max_chunks_per_doc"] = self.max_chunks_per_doc
        return body
