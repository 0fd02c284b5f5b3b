"""
Document indexing pipeline orchestrator.

Coordinates source resolution, content routing, chunking, the chunk cap,
embedding and the index write for one source document.

Dependencies: All task modules, configs
System role: Pipeline orchestration (coordinates only)
"""

import logging
import time
from contextlib import AbstractContextManager
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from compliance_index.boundary.aws.s3_client import S3StorageClient

from .configs import (
    EmbeddingSettings,
    ExtractionBudget,
    get_embedding_settings,
    get_extraction_budget,
)
from .models import AuthContext, IndexingResult
from .tasks import (
    ChunkingTask,
    ContentRouter,
    EmbeddingSession,
    EmbeddingTask,
    IndexWriter,
    PdfExtractionStrategy,
    PdfTextExtractor,
    SourceResolver,
    StructuredSerializationStrategy,
    apply_chunk_cap,
    build_metadata_chunk,
    embedding_session,
)

logger = logging.getLogger(__name__)

EmbeddingSessionFactory = Callable[[], AbstractContextManager[EmbeddingSession]]


class IndexingPipeline:
    """Index one source document: resolve -> route -> chunk -> cap -> embed -> write."""

    def __init__(
        self,
        session: AsyncSession,
        storage: S3StorageClient,
        extractor: PdfTextExtractor,
        budget: ExtractionBudget | None = None,
        embedding_settings: EmbeddingSettings | None = None,
        session_factory: EmbeddingSessionFactory | None = None,
        signed_url_expiry: int = 300,
        router: ContentRouter | None = None,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            session: Async database session for this invocation
            storage: Signed URL issuer for stored PDFs
            extractor: PDF text extractor
            budget: Extraction budget (uses environment if None)
            embedding_settings: Embedding model settings (uses environment if None)
            session_factory: Returns a context manager yielding an EmbeddingSession
            signed_url_expiry: Lifetime of PDF read URLs in seconds
            router: Content router override
        """
        self._session = session
        self._budget = budget or get_extraction_budget()
        settings = embedding_settings or get_embedding_settings()
        self._session_factory = session_factory or (lambda: embedding_session(settings))

        self._resolver = SourceResolver(session, self._budget)
        self._router = router or ContentRouter(
            [
                PdfExtractionStrategy(storage, extractor, signed_url_expiry),
                StructuredSerializationStrategy(self._budget),
            ]
        )
        self._chunking_task = ChunkingTask(self._budget)
        self._embedding_task = EmbeddingTask()
        self._writer = IndexWriter(session)

    async def run(self, queue_id: str, auth: AuthContext) -> IndexingResult:
        """
        Index a source document end to end.

        Args:
            queue_id: Queue entry id
            auth: Authorized caller

        Returns:
            IndexingResult: Persisted chunk count, page count and cap info

        Raises:
            DocumentNotFoundError: Unknown queue entry
            StateConflictError: Entry not parsed/embedded
            TenantResolutionError: No owning organization
            NoIndexableContentError: Nothing to index
            StorageError: PDF read URL could not be issued
            EmbeddingError: Every chunk failed to embed
            PersistenceError: Index write failed
        """
        start_time = time.perf_counter()
        logger.info("%s:run - START queue_id=%s", __name__, queue_id)

        doc = await self._resolver.load(queue_id)
        tenant_id = await self._resolver.resolve_tenant(doc, auth)

        routed = await self._router.route(doc, auth)

        chunks = [build_metadata_chunk(doc), *self._chunking_task.chunk(routed.pages)]
        cap = apply_chunk_cap(chunks, self._budget.max_chunks_per_doc)
        logger.info(
            "%s:run - chunks=%d text_chars=%d%s",
            __name__,
            len(cap.chunks),
            sum(c.chars for c in cap.chunks),
            f" (capped from {cap.precap_count})" if cap.truncated else "",
        )

        with self._session_factory() as session:
            embedded = await self._embedding_task.embed(cap.chunks, session)

        chunk_count = await self._writer.write(doc, tenant_id, embedded, auth, routed.page_count)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        result = IndexingResult(
            queue_id=doc.id,
            document_id=doc.document_id,
            chunk_count=chunk_count,
            page_count=routed.page_count,
            truncated_for_embedding=cap.truncated,
            precap_chunk_count=cap.precap_count,
            max_chunks_per_doc=self._budget.max_chunks_per_doc,
            content_strategy=routed.strategy,
            processing_time_ms=elapsed_ms,
        )
        logger.info(
            "%s:run - DONE chunks=%d pages=%d in %.0fms",
            __name__,
            result.chunk_count,
            result.page_count,
            elapsed_ms,
            extra={"queue_id": str(doc.id), "strategy": routed.strategy},
        )
        return result
