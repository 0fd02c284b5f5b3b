"""Tests for embedding sessions and the embedding stage.

Tests:
- Session lifecycle (lazy load, release on exit, closed session)
- Per-chunk failure skipping and contiguous renumbering
- All-fail and metadata-fail escalation
"""

import pytest

from compliance_index.core.document_indexing.models import Chunk
from compliance_index.core.document_indexing.tasks import EmbeddingSession, EmbeddingTask, embedding_session
from compliance_index.core.exceptions import EmbeddingError



def make_chunks(*texts: str) -> list[Chunk]:
    chunks = [Chunk(index=0, text="File: permit.pdf", source_section="metadata")]
    chunks.extend(Chunk(index=i, text=text, source_page=i) for i, text in enumerate(texts, start=1))
    return chunks


class TestEmbeddingSession:
    """Per-invocation model handle."""

    def test_model_loaded_lazily_once(self, embedding_settings, fake_encoder) -> None:
        """The loader runs on first embed only."""
        loads = []

        def loader(settings):
            loads.append(settings.model_name)
            return fake_encoder

        session = EmbeddingSession(embedding_settings, loader=loader)
        assert not session.is_loaded

        session.embed("a")
        session.embed("b")

        assert loads == ["thenlper/gte-small"]
        assert fake_encoder.calls == ["a", "b"]

    def test_context_manager_releases_model(self, embedding_settings, fake_encoder) -> None:
        """Leaving the scope closes the session."""
        with embedding_session(embedding_settings, loader=lambda s: fake_encoder) as session:
            vector = session.embed("text")
            assert len(vector) == 384

        assert not session.is_loaded
        with pytest.raises(RuntimeError):
            session.embed("again")

    def test_released_on_error(self, embedding_settings, fake_encoder) -> None:
        """The session is closed even when the scope raises."""
        with pytest.raises(ValueError):
            with embedding_session(embedding_settings, loader=lambda s: fake_encoder) as session:
                session.embed("text")
                raise ValueError("boom")

        assert not session.is_loaded

    def test_dimension_mismatch(self, embedding_settings, make_encoder) -> None:
        """Vectors of the wrong size are rejected."""
        session = EmbeddingSession(embedding_settings, loader=lambda s: make_encoder(dimension=768))

        with pytest.raises(ValueError):
            session.embed("text")


class TestEmbeddingTask:
    """Sequential embedding of capped chunks."""

    @pytest.mark.asyncio
    async def test_embeds_all_chunks(self, embedding_settings, fake_encoder) -> None:
        """Every chunk gets a vector and keeps its position."""
        session = EmbeddingSession(embedding_settings, loader=lambda s: fake_encoder)

        result = await EmbeddingTask().embed(make_chunks("one", "two"), session)

        assert [c.index for c in result] == [0, 1, 2]
        assert all(c.embedding is not None for c in result)
        assert fake_encoder.calls == ["File: permit.pdf", "one", "two"]

    @pytest.mark.asyncio
    async def test_failed_chunk_skipped_and_renumbered(self, embedding_settings, make_encoder) -> None:
        """A failing content chunk is dropped without leaving a gap."""
        encoder = make_encoder(fail_on={"bad"})
        session = EmbeddingSession(embedding_settings, loader=lambda s: encoder)

        result = await EmbeddingTask().embed(make_chunks("one", "bad", "three"), session)

        assert [c.index for c in result] == [0, 1, 2]
        assert [c.text for c in result] == ["File: permit.pdf", "one", "three"]
        assert result[2].source_page == 3

    @pytest.mark.asyncio
    async def test_all_chunks_fail(self, embedding_settings, make_encoder) -> None:
        """No embedded chunk at all is an EmbeddingError."""
        session = EmbeddingSession(embedding_settings, loader=lambda s: make_encoder(fail_on={""}))
        chunks = [Chunk(index=1, text="one"), Chunk(index=2, text="two")]

        with pytest.raises(EmbeddingError, match="All embeddings failed") as exc_info:
            await EmbeddingTask().embed(chunks, session)

        assert exc_info.value.details["chunks_attempted"] == 2
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_metadata_chunk_failure(self, embedding_settings, make_encoder) -> None:
        """Chunk 0 must hold the metadata, so its failure is fatal."""
        encoder = make_encoder(fail_on={"File:"})
        session = EmbeddingSession(embedding_settings, loader=lambda s: encoder)

        with pytest.raises(EmbeddingError):
            await EmbeddingTask().embed(make_chunks("one"), session)

    @pytest.mark.asyncio
    async def test_empty_input(self, embedding_settings, fake_encoder) -> None:
        """Nothing to embed returns nothing and loads no model."""
        session = EmbeddingSession(embedding_settings, loader=lambda s: fake_encoder)

        assert await EmbeddingTask().embed([], session) == []
        assert not session.is_loaded
