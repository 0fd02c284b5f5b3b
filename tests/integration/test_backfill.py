"""Tests for BackfillRunner.

Tests:
- Dry run lists candidates only
- Entries that already have chunks are skipped
- Batch size, pacing and remaining count
- One failure does not stop the batch
"""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from compliance_index.boundary.db.CRUD import chunk_crud, source_document_crud
from compliance_index.boundary.db.models import QueueStatus
from compliance_index.core.document_indexing.backfill import (
    GENERIC_FAILURE,
    BackfillRequest,
    BackfillRunner,
)
from compliance_index.core.document_indexing.entrypoint import IndexingPipeline
from compliance_index.core.document_indexing.models import AuthContext
from compliance_index.core.document_indexing.tasks import embedding_session

ORG_ID = uuid.uuid4()


@pytest.fixture
def pipeline_factory(mock_storage, mock_extractor, budget, embedding_settings, fake_encoder):
    def _factory(session) -> IndexingPipeline:
        return IndexingPipeline(
            session,
            mock_storage,
            mock_extractor,
            budget=budget,
            embedding_settings=embedding_settings,
            session_factory=lambda: embedding_session(embedding_settings, loader=lambda s: fake_encoder),
        )

    return _factory


@pytest.fixture
def runner(session_factory, pipeline_factory) -> BackfillRunner:
    return BackfillRunner(session_factory, pipeline_factory, page_size=2, delay_seconds=0)


@pytest.fixture
async def uploader(test_async_db, make_user_profile):
    return await make_user_profile(test_async_db, ORG_ID)


async def seed_parsed(session, make_queue_entry, uploader_id, count: int, **overrides):
    return [
        await make_queue_entry(session, file_name=f"permit_{i}.pdf", uploaded_by=uploader_id, **overrides)
        for i in range(count)
    ]


class TestFindCandidates:
    """Candidate listing."""

    @pytest.mark.asyncio
    async def test_nothing_parsed(self, runner) -> None:
        """An empty queue reports zero."""
        report = await runner.run(BackfillRequest())

        assert report.to_response() == {
            "success": True,
            "message": "No parsed entries to backfill",
            "total": 0,
        }

    @pytest.mark.asyncio
    async def test_dry_run_lists_unindexed(self, runner, test_async_db, make_queue_entry, uploader, mock_extractor) -> None:
        """Dry run pages through every parsed entry and indexes nothing."""
        entries = await seed_parsed(test_async_db, make_queue_entry, uploader.id, 5)
        await make_queue_entry(test_async_db, status=QueueStatus.EMBEDDED)

        report = await runner.run(BackfillRequest(dry_run=True))
        body = report.to_response()

        assert body["dry_run"] is True
        assert body["total_parsed"] == 5
        assert body["needs_embedding"] == 5
        assert {e["id"] for e in body["entries"]} == {str(e.id) for e in entries}
        assert all(e["category"] == "npdes_permit" for e in body["entries"])
        assert await chunk_crud.count_for_document(test_async_db, None, entries[0].id) == 0

    @pytest.mark.asyncio
    async def test_skips_entries_with_chunks(self, runner, pipeline_factory, session_factory, test_async_db, make_queue_entry, uploader) -> None:
        """Parsed entries that already have chunks are not candidates."""
        indexed, pending = await seed_parsed(test_async_db, make_queue_entry, uploader.id, 2)
        async with session_factory() as session:
            await pipeline_factory(session).run(str(indexed.id), AuthContext.system())

        # Indexing moved it to embedded; put it back to parsed to model a stale status.
        async with session_factory() as session:
            await source_document_crud.update_by_id(session, indexed.id, status=QueueStatus.PARSED)
            await session.commit()

        total, candidates = await runner.find_candidates(BackfillRequest())

        assert total == 2
        assert [c.id for c in candidates] == [pending.id]

    @pytest.mark.asyncio
    async def test_filters(self, runner, test_async_db, make_queue_entry, uploader) -> None:
        """Category and state filters narrow the listing."""
        await seed_parsed(test_async_db, make_queue_entry, uploader.id, 2)
        lab = await make_queue_entry(test_async_db, file_name="lab.xlsx", file_category="lab_data", state_code="KY")

        total, candidates = await runner.find_candidates(BackfillRequest(category="lab_data", state_code="KY"))

        assert total == 1
        assert candidates[0].id == lab.id


class TestRun:
    """Batch execution."""

    @pytest.mark.asyncio
    async def test_indexes_one_batch(self, runner, test_async_db, make_queue_entry, uploader, mock_extractor) -> None:
        """batch_size bounds the work and the rest is reported as remaining."""
        await seed_parsed(test_async_db, make_queue_entry, uploader.id, 3)

        report = await runner.run(BackfillRequest(batch_size=2))
        body = report.to_response()

        assert body["processed"] == 2
        assert body["succeeded"] == 2
        assert body["failed"] == 0
        assert body["remaining"] == 1
        assert body["total_chunks"] == 4
        assert all(r["chunkCount"] == 2 for r in body["results"])
        assert "error" not in body["results"][0]
        mock_extractor.extract.assert_not_called()

    @pytest.mark.asyncio
    async def test_pauses_between_documents(self, session_factory, pipeline_factory, test_async_db, make_queue_entry, uploader) -> None:
        """The delay is applied between documents, not after the last."""
        await seed_parsed(test_async_db, make_queue_entry, uploader.id, 3)
        runner = BackfillRunner(session_factory, pipeline_factory, delay_seconds=2.0)

        with patch("compliance_index.core.document_indexing.backfill.asyncio.sleep", new=AsyncMock()) as sleep:
            await runner.run(BackfillRequest())

        assert sleep.await_count == 2
        sleep.assert_awaited_with(2.0)

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_batch(self, runner, test_async_db, make_queue_entry, make_user_profile, uploader) -> None:
        """A document without a tenant fails; the others still index."""
        orphan_uploader = await make_user_profile(test_async_db, None)
        await seed_parsed(test_async_db, make_queue_entry, uploader.id, 2)
        orphan = await make_queue_entry(test_async_db, file_name="orphan.pdf", uploaded_by=orphan_uploader.id)

        report = await runner.run(BackfillRequest())

        assert report.succeeded == 2
        assert report.failed == 1
        failed = next(r for r in report.results if not r.success)
        assert failed.id == orphan.id
        assert failed.error.startswith("Cannot resolve organization_id")

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic(self, session_factory, test_async_db, make_queue_entry, uploader) -> None:
        """Non-domain errors are reported without internals."""
        await seed_parsed(test_async_db, make_queue_entry, uploader.id, 1)
        broken = MagicMock()
        broken.run = AsyncMock(side_effect=RuntimeError("connection reset"))
        runner = BackfillRunner(session_factory, lambda session: broken, delay_seconds=0)

        report = await runner.run(BackfillRequest())

        assert report.results[0].success is False
        assert report.results[0].error == GENERIC_FAILURE
