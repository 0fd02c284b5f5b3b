"""
Index writer: replaces a document's chunk set atomically.

Within one transaction: lock the document key, delete all existing chunks
of the document, insert the new set, move the queue entry to EMBEDDED and,
for interactive runs, append an audit entry. Any failure rolls everything
back so prior chunks and status survive and a retry is safe.

Dependencies: sqlalchemy, compliance_index.boundary.db.CRUD
System role: Final persistence stage of the indexing pipeline
"""

import json
import logging
import uuid
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_index.boundary.db.CRUD import audit_crud, chunk_crud, source_document_crud
from compliance_index.core.exceptions import PersistenceError

from ..models import AuthContext, Chunk, SourceDocument

logger = logging.getLogger(__name__)

AUDIT_ACTION = "generate_embedding"
AUDIT_MODULE = "document_search"
AUDIT_TABLE = "document_chunks"


class IndexWriter:
    """Persist embedded chunks for one document."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize writer.

        Args:
            session: Async database session for this invocation
        """
        self.session = session

    @staticmethod
    def build_rows(
        doc: SourceDocument,
        tenant_id: uuid.UUID,
        chunks: list[Chunk],
    ) -> list[dict[str, Any]]:
        """Map embedded chunks to document_chunks column dicts."""
        data = doc.typed_extracted_data()
        permit_number = data.permit_number if data is not None else None
        return [
            {
                "document_id": doc.document_id,
                "queue_entry_id": doc.id,
                "organization_id": tenant_id,
                "chunk_index": chunk.index,
                "chunk_text": chunk.text,
                "chunk_chars": chunk.chars,
                "source_page": chunk.source_page,
                "source_section": chunk.source_section,
                "document_type": doc.file_category,
                "state_code": doc.state_code,
                "permit_number": permit_number,
                "file_name": doc.file_name,
                "embedding": chunk.embedding,
            }
            for chunk in chunks
        ]

    async def write(
        self,
        doc: SourceDocument,
        tenant_id: uuid.UUID,
        chunks: list[Chunk],
        auth: AuthContext,
        page_count: int,
    ) -> int:
        """
        Replace the document's chunk set and mark it embedded.

        Args:
            doc: Source document
            tenant_id: Owning organization
            chunks: Embedded chunks with indices 0..N-1
            auth: Caller context (audit only for interactive callers)
            page_count: Pages routed to the chunker

        Returns:
            int: Chunks written

        Raises:
            PersistenceError: Any database failure; nothing is changed
        """
        operation = "lock"
        try:
            await chunk_crud.lock_document(self.session, doc.document_key)

            operation = "delete"
            deleted = await chunk_crud.delete_for_document(self.session, doc.document_id, doc.id)

            operation = "insert"
            await chunk_crud.bulk_upsert(self.session, self.build_rows(doc, tenant_id, chunks))

            operation = "status"
            await source_document_crud.mark_embedded(self.session, doc.id)

            if auth.is_interactive:
                operation = "audit"
                await audit_crud.append(
                    self.session,
                    user_id=auth.caller_id,
                    action=AUDIT_ACTION,
                    module=AUDIT_MODULE,
                    table_name=AUDIT_TABLE,
                    record_id=doc.document_id,
                    description=json.dumps(
                        {
                            "queue_id": str(doc.id),
                            "document_id": str(doc.document_id) if doc.document_id else None,
                            "chunk_count": len(chunks),
                            "page_count": page_count,
                            "org_id": str(tenant_id),
                        }
                    ),
                )

            operation = "commit"
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "%s:write - %s failed for %s: %s",
                __name__,
                operation,
                doc.document_key,
                e,
            )
            raise PersistenceError(
                f"Chunk write failed during {operation}",
                operation=operation,
                details={"queue_id": str(doc.id), "error": str(e)},
            ) from e

        logger.info(
            "%s:write - Replaced %d chunks with %d for %s",
            __name__,
            deleted,
            len(chunks),
            doc.document_key,
            extra={"organization_id": str(tenant_id)},
        )
        return len(chunks)
