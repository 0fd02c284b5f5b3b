"""
Document chunk ORM model.

One row per indexed text fragment with its embedding. Rows for a document
are always replaced as a complete set; (document_id, chunk_index) is unique.

Dependencies: sqlalchemy, pgvector, compliance_index.boundary.db.base
System role: Tenant-scoped search index storage
"""

import uuid

from pgvector.sqlalchemy import Vector
from sqlalchemy import JSON, ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from compliance_index.boundary.db.base import Base, TimestampMixin, UUIDMixin
from compliance_index.core.document_indexing.configs import get_embedding_settings


class DocumentChunkModel(Base, UUIDMixin, TimestampMixin):
    """
    Indexed chunk of a source document.

    Attributes:
        document_id: Canonical document (nullable until the entry is linked)
        queue_entry_id: Source queue entry the chunk was built from
        organization_id: Owning tenant, required for retrieval isolation
        chunk_index: 0 for the metadata chunk, 1..N for content
        chunk_text: Raw chunk text
        chunk_chars: Character count of chunk_text
        source_page: Originating page number, 0 for summary/unpaginated text
        source_section: Section label ("metadata" for chunk 0)
        document_type: Upload category
        state_code: State code copied from the queue entry
        permit_number: Permit number from extracted_data, if any
        file_name: Original filename
        embedding: Normalized dense vector
    """

    __tablename__ = "document_chunks"

    document_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=True,
    )
    queue_entry_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("file_processing_queue.id", ondelete="SET NULL"),
        nullable=True,
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)

    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    chunk_text: Mapped[str] = mapped_column(Text, nullable=False)
    chunk_chars: Mapped[int | None] = mapped_column(Integer, nullable=True)

    source_page: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    source_section: Mapped[str | None] = mapped_column(String(255), nullable=True)

    document_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    state_code: Mapped[str | None] = mapped_column(String(8), nullable=True)
    permit_number: Mapped[str | None] = mapped_column(String(128), nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(512), nullable=True)

    embedding: Mapped[list[float] | None] = mapped_column(
        Vector(get_embedding_settings().dimension).with_variant(JSON(), "sqlite"),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint("document_id", "chunk_index", name="dc_doc_chunk_unique"),
        Index("idx_dc_document_id", "document_id"),
        Index("idx_dc_queue_entry_id", "queue_entry_id"),
        Index("idx_dc_org_id", "organization_id"),
    )
