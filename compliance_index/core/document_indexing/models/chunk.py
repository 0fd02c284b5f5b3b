"""
Chunk domain model for the indexing pipeline.

Represents one indexed text fragment with provenance and, once embedded,
its vector.

Dependencies: pydantic
System role: Data structure for document chunks in the indexing pipeline
"""

from pydantic import BaseModel, Field

METADATA_SECTION = "metadata"


class Chunk(BaseModel):
    """Document chunk with optional embedding vector."""

    index: int = Field(ge=0, description="Position in the document; 0 is the metadata chunk")
    text: str = Field(description="Chunk text content")
    source_page: int = Field(default=0, description="Originating page, 0 for unpaginated text")
    source_section: str | None = Field(default=None, description="Section label")
    embedding: list[float] | None = Field(default=None, description="Embedding vector")

    @property
    def chars(self) -> int:
        """Character count of the chunk text."""
        return len(self.text)

    @property
    def is_metadata(self) -> bool:
        """Whether this is the reserved index-0 metadata chunk."""
        return self.source_section == METADATA_SECTION
