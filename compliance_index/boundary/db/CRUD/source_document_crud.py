"""
Source document CRUD operations.

Reads queue entries for indexing, loads their extracted_data with the
records array truncated, pages through backfill candidates and records
the EMBEDDED status transition.

Dependencies: sqlalchemy, compliance_index.boundary.db.models
System role: Queue entry persistence operations
"""

import json
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_index.boundary.db.CRUD.base_crud import BaseCRUD
from compliance_index.boundary.db.models.source_document_model import QueueStatus, SourceDocumentModel


def truncate_records(extracted: Any, max_records: int) -> Any:
    """
    Cap the `records` array of an extraction payload.

    Mirrors the server-side get_embedding_extracted_data function for
    databases that do not have it.

    Args:
        extracted: Parser payload (may be None or a non-object JSON value)
        max_records: Records to keep

    Returns:
        Payload copy with at most max_records records, annotated with
        records_truncated/records_total when anything was dropped
    """
    if not isinstance(extracted, dict):
        return extracted
    records = extracted.get("records")
    if not isinstance(records, list) or len(records) <= max_records:
        return extracted

    trimmed = {k: v for k, v in extracted.items() if k != "records"}
    trimmed["records"] = records[:max_records]
    trimmed["records_truncated"] = True
    trimmed["records_total"] = len(records)
    return trimmed


class SourceDocumentCRUD(BaseCRUD[SourceDocumentModel]):
    """CRUD operations for SourceDocumentModel."""

    def __init__(self) -> None:
        """Initialize SourceDocumentCRUD with SourceDocumentModel."""
        super().__init__(SourceDocumentModel)

    async def get_extracted_data(
        self,
        session: AsyncSession,
        id: UUID,
        max_records: int,
    ) -> Any:
        """
        Load extracted_data with the records array capped.

        On PostgreSQL the cap is applied in the database so multi-megabyte
        payloads never reach the worker.

        Args:
            session: Async database session
            id: Queue entry UUID
            max_records: Records to keep

        Returns:
            Truncated payload, or None when the entry has no extracted_data.
            Non-object JSON values are returned unchanged.
        """
        if session.get_bind().dialect.name == "postgresql":
            stmt = text("SELECT get_embedding_extracted_data(:queue_id, :max_records)")
            result = await session.execute(stmt, {"queue_id": id, "max_records": max_records})
            payload = result.scalar_one_or_none()
            if isinstance(payload, str):
                payload = json.loads(payload)
            return payload

        stmt = select(SourceDocumentModel.extracted_data).where(SourceDocumentModel.id == id)
        result = await session.execute(stmt)
        return truncate_records(result.scalar_one_or_none(), max_records)

    async def list_by_status(
        self,
        session: AsyncSession,
        status: QueueStatus,
        limit: int,
        offset: int = 0,
        category: str | None = None,
        state_code: str | None = None,
    ) -> Sequence[SourceDocumentModel]:
        """
        Page through queue entries with a given status, oldest first.

        Args:
            session: Async database session
            status: Queue status to filter by
            limit: Page size
            offset: Rows to skip
            category: Optional file_category filter
            state_code: Optional state_code filter

        Returns:
            Sequence of matching entries (extracted_data not loaded)
        """
        stmt = select(SourceDocumentModel).where(SourceDocumentModel.status == status)
        if category:
            stmt = stmt.where(SourceDocumentModel.file_category == category)
        if state_code:
            stmt = stmt.where(SourceDocumentModel.state_code == state_code)
        stmt = (
            stmt.order_by(SourceDocumentModel.created_at.asc(), SourceDocumentModel.id.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def mark_embedded(self, session: AsyncSession, id: UUID) -> bool:
        """
        Transition a queue entry to EMBEDDED.

        Args:
            session: Async database session
            id: Queue entry UUID

        Returns:
            True if the entry was updated
        """
        return await self.update_by_id(session, id, status=QueueStatus.EMBEDDED)


source_document_crud = SourceDocumentCRUD()
