"""
Source document resolution.

Loads the queue entry being indexed (with its extraction payload capped
server-side), checks that it is in an indexable status, and resolves the
organization that owns the resulting chunks.

Dependencies: sqlalchemy, compliance_index.boundary.db.CRUD
System role: First data stage of the indexing pipeline
"""

import logging
import uuid
from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from compliance_index.boundary.db.CRUD import document_crud, source_document_crud, user_profile_crud
from compliance_index.core.exceptions import (
    DocumentNotFoundError,
    StateConflictError,
    TenantResolutionError,
)

from ..configs import ExtractionBudget
from ..models import AuthContext, SourceDocument

logger = logging.getLogger(__name__)

TenantStrategy = Callable[
    [AsyncSession, SourceDocument, AuthContext],
    Awaitable[uuid.UUID | None],
]


async def tenant_from_auth(
    session: AsyncSession, doc: SourceDocument, auth: AuthContext
) -> uuid.UUID | None:
    """Tenant implied by the caller's credential."""
    return auth.tenant_id_hint


async def tenant_from_uploader(
    session: AsyncSession, doc: SourceDocument, auth: AuthContext
) -> uuid.UUID | None:
    """Tenant of the user who uploaded the document."""
    if doc.uploaded_by is None:
        return None
    return await user_profile_crud.get_organization_id(session, doc.uploaded_by)


async def tenant_from_document(
    session: AsyncSession, doc: SourceDocument, auth: AuthContext
) -> uuid.UUID | None:
    """Tenant owning the linked canonical document."""
    if doc.document_id is None:
        return None
    return await document_crud.get_organization_id(session, doc.document_id)


DEFAULT_TENANT_STRATEGIES: tuple[TenantStrategy, ...] = (
    tenant_from_auth,
    tenant_from_uploader,
    tenant_from_document,
)


class SourceResolver:
    """Load source documents and resolve their tenant."""

    def __init__(
        self,
        session: AsyncSession,
        budget: ExtractionBudget,
        tenant_strategies: tuple[TenantStrategy, ...] = DEFAULT_TENANT_STRATEGIES,
    ) -> None:
        """
        Initialize resolver.

        Args:
            session: Async database session for this invocation
            budget: Provides extracted_records_limit
            tenant_strategies: Tenant lookups in priority order
        """
        self.session = session
        self.budget = budget
        self.tenant_strategies = tenant_strategies

    async def load(self, queue_id: str) -> SourceDocument:
        """
        Load a queue entry and its capped extraction payload.

        The status is checked before the payload is fetched. A payload that
        is not a JSON object is replaced by an empty one, so only the
        metadata chunk is indexed.

        Args:
            queue_id: Queue entry id as received from the caller

        Returns:
            SourceDocument: Snapshot with extracted_data loaded

        Raises:
            DocumentNotFoundError: Unknown or malformed id
            StateConflictError: Entry not parsed/embedded
        """
        try:
            entry_id = uuid.UUID(str(queue_id))
        except ValueError as e:
            raise DocumentNotFoundError(str(queue_id), details={"reason": "malformed id"}) from e

        row = await source_document_crud.get_by_id(self.session, entry_id)
        if row is None:
            raise DocumentNotFoundError(str(queue_id))

        doc = SourceDocument(
            id=row.id,
            storage_bucket=row.storage_bucket,
            storage_path=row.storage_path,
            file_name=row.file_name,
            file_category=row.file_category,
            state_code=row.state_code,
            status=row.status.value,
            uploaded_by=row.uploaded_by,
            document_id=row.document_id,
        )
        self.check_indexable(doc)

        extracted = await source_document_crud.get_extracted_data(
            self.session,
            entry_id,
            self.budget.extracted_records_limit,
        )
        if extracted is not None and not isinstance(extracted, dict):
            logger.warning(
                "%s:load - Non-object extracted_data (%s) for %s, indexing metadata only",
                __name__,
                type(extracted).__name__,
                entry_id,
            )
            extracted = {}
        doc = doc.model_copy(update={"extracted_data": extracted})
        logger.info(
            "%s:load - Loaded %s (%s)",
            __name__,
            doc.file_name,
            doc.file_category,
            extra={
                "queue_id": str(doc.id),
                "status": doc.status,
                "has_extracted_data": extracted is not None,
            },
        )
        return doc

    def check_indexable(self, doc: SourceDocument) -> None:
        """
        Reject documents that are not parsed or already embedded.

        Raises:
            StateConflictError: Any other status
        """
        if not doc.is_indexable:
            raise StateConflictError(doc.status, details={"queue_id": str(doc.id)})

    async def resolve_tenant(self, doc: SourceDocument, auth: AuthContext) -> uuid.UUID:
        """
        Resolve the owning organization, first non-null strategy wins.

        Args:
            doc: Source document
            auth: Caller context

        Returns:
            UUID: Organization id

        Raises:
            TenantResolutionError: No strategy produced a tenant
        """
        for strategy in self.tenant_strategies:
            tenant_id = await strategy(self.session, doc, auth)
            if tenant_id is not None:
                logger.debug(
                    "%s:resolve_tenant - %s resolved %s",
                    __name__,
                    strategy.__name__,
                    tenant_id,
                )
                return tenant_id

        raise TenantResolutionError(
            details={
                "queue_id": str(doc.id),
                "uploaded_by": str(doc.uploaded_by) if doc.uploaded_by else None,
                "document_id": str(doc.document_id) if doc.document_id else None,
            }
        )
