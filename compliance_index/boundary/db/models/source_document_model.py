"""
Source document (processing queue entry) ORM model.

Rows are created and parsed by the upload pipeline; the indexing service
only reads them and moves `status` to `embedded`.

Dependencies: sqlalchemy, compliance_index.boundary.db.base
System role: Read model for documents awaiting indexing
"""

import enum
import uuid
from typing import Any

from sqlalchemy import JSON, Enum, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from compliance_index.boundary.db.base import Base, TimestampMixin, UUIDMixin


class QueueStatus(str, enum.Enum):
    """
    File processing queue lifecycle states.

    The full set is owned by the upload pipeline. Indexing accepts PARSED or
    EMBEDDED entries and writes EMBEDDED after a successful index write.
    """

    UPLOADED = "uploaded"
    QUEUED = "queued"
    PROCESSING = "processing"
    PARSED = "parsed"
    VALIDATED = "validated"
    IMPORTED = "imported"
    FAILED = "failed"
    SKIPPED = "skipped"
    ARCHIVED = "archived"
    EMBEDDED = "embedded"
    EMBEDDING_FAILED = "embedding_failed"


class SourceDocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Uploaded, parsed source document tracked in file_processing_queue.

    Attributes:
        storage_bucket: Bucket holding the raw file
        storage_path: Object path inside the bucket
        file_name: Original filename
        file_category: Upload classification (npdes_permit, lab_data, dmr, ...)
        state_code: Two-letter state code, if known
        status: Queue lifecycle state
        uploaded_by: Uploader user id (resolves to a tenant via user_profiles)
        document_id: Canonical documents.id once linked
        extracted_data: Parser output, anywhere from <1KB to several MB
    """

    __tablename__ = "file_processing_queue"

    storage_bucket: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_name: Mapped[str] = mapped_column(String(512), nullable=False)
    file_category: Mapped[str] = mapped_column(String(64), nullable=False)
    state_code: Mapped[str | None] = mapped_column(String(8), nullable=True)

    status: Mapped[QueueStatus] = mapped_column(
        Enum(
            QueueStatus,
            native_enum=False,
            length=32,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=QueueStatus.QUEUED,
    )

    uploaded_by: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    document_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)

    extracted_data: Mapped[dict[str, Any] | None] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=True,
        deferred=True,
        doc="Parser payload; deferred so queue lookups never load it implicitly",
    )
