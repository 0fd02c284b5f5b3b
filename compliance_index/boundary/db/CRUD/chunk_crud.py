"""
Document chunk CRUD operations.

Delete-by-document, batch upsert keyed by (document_id, chunk_index),
and existence counts used by the backfill runner.

Dependencies: sqlalchemy, compliance_index.boundary.db.models
System role: Search index persistence operations
"""

from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, or_, select, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_index.boundary.db.CRUD.base_crud import BaseCRUD
from compliance_index.boundary.db.models.document_chunk_model import DocumentChunkModel

_UPSERT_UPDATE_COLUMNS = (
    "queue_entry_id",
    "organization_id",
    "chunk_text",
    "chunk_chars",
    "source_page",
    "source_section",
    "document_type",
    "state_code",
    "permit_number",
    "file_name",
    "embedding",
)


class ChunkCRUD(BaseCRUD[DocumentChunkModel]):
    """CRUD operations for DocumentChunkModel."""

    def __init__(self) -> None:
        """Initialize ChunkCRUD with DocumentChunkModel."""
        super().__init__(DocumentChunkModel)

    @staticmethod
    def _owner_clause(document_id: UUID | None, queue_entry_id: UUID):
        # Chunks written before the entry was linked carry only queue_entry_id.
        if document_id is not None:
            return or_(
                DocumentChunkModel.document_id == document_id,
                DocumentChunkModel.queue_entry_id == queue_entry_id,
            )
        return DocumentChunkModel.queue_entry_id == queue_entry_id

    async def lock_document(self, session: AsyncSession, key: str) -> None:
        """
        Serialize writers of one document for the current transaction.

        Uses a transaction-scoped advisory lock on PostgreSQL; other
        dialects rely on their own write locking.

        Args:
            session: Async database session
            key: Document key (document id or queue entry id)
        """
        if session.get_bind().dialect.name == "postgresql":
            await session.execute(text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": key})

    async def delete_for_document(
        self,
        session: AsyncSession,
        document_id: UUID | None,
        queue_entry_id: UUID,
    ) -> int:
        """
        Delete every chunk of a document.

        Matches by document_id or queue_entry_id when the entry is linked,
        otherwise by queue_entry_id alone.

        Args:
            session: Async database session
            document_id: Canonical document id, if any
            queue_entry_id: Source queue entry id

        Returns:
            Number of rows deleted
        """
        stmt = delete(DocumentChunkModel).where(self._owner_clause(document_id, queue_entry_id))
        result = await session.execute(stmt)
        return result.rowcount or 0

    async def bulk_upsert(self, session: AsyncSession, rows: list[dict[str, Any]]) -> None:
        """
        Insert chunk rows, updating on (document_id, chunk_index) conflict.

        Args:
            session: Async database session
            rows: Column dicts for DocumentChunkModel
        """
        if not rows:
            return

        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            insert_fn = postgresql.insert
        elif dialect == "sqlite":
            insert_fn = sqlite.insert
        else:
            session.add_all([DocumentChunkModel(**row) for row in rows])
            await session.flush()
            return

        stmt = insert_fn(DocumentChunkModel).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=["document_id", "chunk_index"],
            set_={col: getattr(stmt.excluded, col) for col in _UPSERT_UPDATE_COLUMNS},
        )
        await session.execute(stmt)

    async def count_for_document(
        self,
        session: AsyncSession,
        document_id: UUID | None,
        queue_entry_id: UUID,
    ) -> int:
        """Count existing chunks of a document."""
        stmt = select(func.count(DocumentChunkModel.id)).where(
            self._owner_clause(document_id, queue_entry_id)
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def list_for_document(
        self,
        session: AsyncSession,
        document_id: UUID | None,
        queue_entry_id: UUID,
    ) -> list[DocumentChunkModel]:
        """Return a document's chunks ordered by chunk_index."""
        stmt = (
            select(DocumentChunkModel)
            .where(self._owner_clause(document_id, queue_entry_id))
            .order_by(DocumentChunkModel.chunk_index)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


chunk_crud = ChunkCRUD()
