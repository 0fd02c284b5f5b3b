"""
Backfill runner for documents that were parsed but never indexed.

Pages through PARSED queue entries oldest first, skips entries that
already have chunks, and indexes up to `batch_size` of the rest one at a
time as the system actor, pausing between documents to respect the
extraction model's rate limit. One failure never stops the batch.

Dependencies: sqlalchemy, pydantic, asyncio
System role: Operator-triggered bulk indexing
"""

import asyncio
import logging
import uuid
from typing import Any, Callable

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_index.boundary.db.CRUD import chunk_crud, source_document_crud
from compliance_index.boundary.db.models import QueueStatus
from compliance_index.core.exceptions import IndexingException

from .entrypoint import IndexingPipeline
from .models import AuthContext

logger = logging.getLogger(__name__)

PipelineFactory = Callable[[AsyncSession], IndexingPipeline]

GENERIC_FAILURE = "Embedding generation failed. Please try again or contact support."


class BackfillRequest(BaseModel):
    """Backfill options; every field is optional."""

    batch_size: int = Field(default=50, ge=1, description="Entries indexed in this call")
    dry_run: bool = Field(default=False, description="List candidates without indexing")
    category: str | None = Field(default=None, description="Only this file_category")
    state_code: str | None = Field(default=None, description="Only this state_code")


class BackfillCandidate(BaseModel):
    """Parsed entry without chunks."""

    id: uuid.UUID
    file_name: str
    category: str
    document_id: uuid.UUID | None = None


class BackfillEntryResult(BaseModel):
    """Outcome of indexing one backfill entry."""

    id: uuid.UUID
    file_name: str
    success: bool
    error: str | None = None
    chunkCount: int | None = None


class BackfillReport(BaseModel):
    """Summary of one backfill call."""

    dry_run: bool = False
    total_parsed: int = 0
    needs_embedding: int = 0
    candidates: list[BackfillCandidate] = Field(default_factory=list)
    results: list[BackfillEntryResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def to_response(self) -> dict[str, Any]:
        """Build the HTTP success body."""
        if self.total_parsed == 0:
            return {"success": True, "message": "No parsed entries to backfill", "total": 0}

        if self.dry_run:
            return {
                "success": True,
                "dry_run": True,
                "total_parsed": self.total_parsed,
                "needs_embedding": self.needs_embedding,
                "entries": [
                    {"id": str(c.id), "file_name": c.file_name, "category": c.category}
                    for c in self.candidates
                ],
            }

        return {
            "success": True,
            "total_parsed": self.total_parsed,
            "needs_embedding": self.needs_embedding,
            "processed": len(self.results),
            "succeeded": self.succeeded,
            "failed": self.failed,
            "total_chunks": sum(r.chunkCount or 0 for r in self.results),
            "remaining": self.needs_embedding - len(self.results),
            "results": [r.model_dump(mode="json", exclude_none=True) for r in self.results],
        }


class BackfillRunner:
    """Index parsed-but-unindexed documents in bounded batches."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        pipeline_factory: PipelineFactory,
        page_size: int = 1000,
        delay_seconds: float = 2.0,
    ) -> None:
        """
        Initialize runner.

        Args:
            session_factory: Opens one session per listing and per document
            pipeline_factory: Builds an IndexingPipeline bound to a session
            page_size: Queue rows fetched per listing query
            delay_seconds: Pause between indexed documents
        """
        self._session_factory = session_factory
        self._pipeline_factory = pipeline_factory
        self._page_size = page_size
        self._delay_seconds = delay_seconds

    async def find_candidates(self, request: BackfillRequest) -> tuple[int, list[BackfillCandidate]]:
        """
        List parsed entries that have no chunks yet.

        Returns:
            (total parsed entries matched, candidates without chunks)
        """
        total = 0
        candidates: list[BackfillCandidate] = []

        async with self._session_factory() as session:
            offset = 0
            while True:
                rows = await source_document_crud.list_by_status(
                    session,
                    QueueStatus.PARSED,
                    limit=self._page_size,
                    offset=offset,
                    category=request.category,
                    state_code=request.state_code,
                )
                total += len(rows)
                for row in rows:
                    existing = await chunk_crud.count_for_document(session, row.document_id, row.id)
                    if existing == 0:
                        candidates.append(
                            BackfillCandidate(
                                id=row.id,
                                file_name=row.file_name,
                                category=row.file_category,
                                document_id=row.document_id,
                            )
                        )
                if len(rows) < self._page_size:
                    break
                offset += self._page_size

        logger.info(
            "%s:find_candidates - %d parsed, %d need embedding",
            __name__,
            total,
            len(candidates),
            extra={"category": request.category, "state_code": request.state_code},
        )
        return total, candidates

    async def _index_one(self, candidate: BackfillCandidate) -> BackfillEntryResult:
        try:
            async with self._session_factory() as session:
                pipeline = self._pipeline_factory(session)
                result = await pipeline.run(str(candidate.id), AuthContext.system())
        except IndexingException as e:
            logger.warning(
                "%s:_index_one - %s failed: %s",
                __name__,
                candidate.file_name,
                e,
            )
            return BackfillEntryResult(
                id=candidate.id,
                file_name=candidate.file_name,
                success=False,
                error=e.public_message,
            )
        except Exception:
            logger.exception("%s:_index_one - Unexpected failure for %s", __name__, candidate.id)
            return BackfillEntryResult(
                id=candidate.id,
                file_name=candidate.file_name,
                success=False,
                error=GENERIC_FAILURE,
            )

        return BackfillEntryResult(
            id=candidate.id,
            file_name=candidate.file_name,
            success=True,
            chunkCount=result.chunk_count,
        )

    async def run(self, request: BackfillRequest) -> BackfillReport:
        """
        Run one backfill batch.

        Args:
            request: Batch size, dry-run flag and filters

        Returns:
            BackfillReport: Candidates (dry run) or per-entry results
        """
        total, candidates = await self.find_candidates(request)
        report = BackfillReport(
            dry_run=request.dry_run,
            total_parsed=total,
            needs_embedding=len(candidates),
        )
        if request.dry_run or total == 0:
            report.candidates = candidates
            return report

        batch = candidates[: request.batch_size]
        for i, candidate in enumerate(batch):
            logger.info(
                "%s:run - Processing %d/%d: %s",
                __name__,
                i + 1,
                len(batch),
                candidate.file_name,
            )
            report.results.append(await self._index_one(candidate))

            if i < len(batch) - 1 and self._delay_seconds > 0:
                await asyncio.sleep(self._delay_seconds)

        logger.info(
            "%s:run - Backfill batch done: %d succeeded, %d failed",
            __name__,
            report.succeeded,
            report.failed,
        )
        return report
