"""
Schemas for the generate-embeddings endpoint.

Dependencies: pydantic
System role: Indexing API contract
"""

from pydantic import BaseModel, Field


class GenerateEmbeddingsRequest(BaseModel):
    """Index one source document. The chunk cap is not a request field."""

    queue_id: str = Field(min_length=1, description="file_processing_queue entry id")


class GenerateEmbeddingsResponse(BaseModel):
    """Successful indexing run."""

    success: bool = True
    documentId: str | None = Field(description="Canonical document id, if linked")
    chunkCount: int = Field(description="Chunks persisted")
    pageCount: int = Field(description="Distinct pages routed to the chunker")
    truncated_for_embedding: bool | None = Field(
        default=None,
        description="Present and true when the chunk cap dropped chunks",
    )
    precap_chunk_count: int | None = Field(
        default=None,
        description="Chunks built before the cap, present only when truncated",
    )
    max_chunks_per_doc: int = Field(description="Configured chunk cap")
