"""
Embedding generation with a local sentence-transformers model.

An EmbeddingSession owns the model for one pipeline invocation: it is
created lazily on first use and released by close(), which the
embedding_session() context manager guarantees. Chunks are embedded one
at a time because the backend's memory ceiling, not CPU, is the binding
constraint.

Dependencies: sentence_transformers, fastapi.concurrency
System role: Embedding stage of the indexing pipeline
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from fastapi.concurrency import run_in_threadpool

from compliance_index.core.exceptions import EmbeddingError

from ..configs import EmbeddingSettings
from ..models import Chunk

logger = logging.getLogger(__name__)

ModelLoader = Callable[[EmbeddingSettings], Any]


def load_sentence_transformer(settings: EmbeddingSettings) -> Any:
    """Load the configured sentence-transformers model."""
    # Imported here so torch is only loaded by processes that embed.
    from sentence_transformers import SentenceTransformer

    logger.info(
        "%s:load_sentence_transformer - Loading %s on %s",
        __name__,
        settings.model_name,
        settings.device,
    )
    return SentenceTransformer(settings.model_name, device=settings.device)


class EmbeddingSession:
    """Embedding model handle scoped to one pipeline invocation."""

    def __init__(
        self,
        settings: EmbeddingSettings,
        loader: ModelLoader = load_sentence_transformer,
    ) -> None:
        """
        Initialize session without loading the model.

        Args:
            settings: Model name, device and expected dimension
            loader: Callable returning an object with encode(texts, ...)
        """
        self.settings = settings
        self._loader = loader
        self._model: Any = None
        self._closed = False

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    def embed(self, text: str) -> list[float]:
        """
        Embed one text with mean pooling and L2 normalization.

        Args:
            text: Chunk text

        Returns:
            list[float]: Vector of settings.dimension floats

        Raises:
            RuntimeError: If the session was closed
            ValueError: If the model returns a vector of the wrong size
        """
        if self._closed:
            raise RuntimeError("Embedding session is closed")
        if self._model is None:
            self._model = self._loader(self.settings)

        vectors = self._model.encode([text], normalize_embeddings=True)
        vector = [float(v) for v in vectors[0]]
        if len(vector) != self.settings.dimension:
            raise ValueError(
                f"Embedding dimension {len(vector)} does not match configured {self.settings.dimension}"
            )
        return vector

    def close(self) -> None:
        """Release the model."""
        self._model = None
        self._closed = True


@contextmanager
def embedding_session(
    settings: EmbeddingSettings,
    loader: ModelLoader = load_sentence_transformer,
) -> Iterator[EmbeddingSession]:
    """Yield an EmbeddingSession that is closed on exit."""
    session = EmbeddingSession(settings, loader)
    try:
        yield session
    finally:
        session.close()


class EmbeddingTask:
    """Embed chunks sequentially, skipping chunks that fail."""

    async def embed(self, chunks: list[Chunk], session: EmbeddingSession) -> list[Chunk]:
        """
        Generate embeddings for chunks.

        A failing content chunk is logged and skipped. Surviving chunks are
        renumbered 0..N-1 in order, so the metadata chunk stays at index 0.

        Args:
            chunks: Capped chunks, metadata chunk first
            session: Session for this invocation

        Returns:
            list[Chunk]: Embedded chunks with contiguous indices

        Raises:
            EmbeddingError: If the metadata chunk or every chunk fails
        """
        if not chunks:
            return []

        embedded: list[Chunk] = []
        failures: list[dict[str, Any]] = []

        for chunk in chunks:
            logger.debug(
                "%s:embed - Embedding chunk %d (%d chars)",
                __name__,
                chunk.index,
                chunk.chars,
            )
            try:
                vector = await run_in_threadpool(session.embed, chunk.text)
            except Exception as e:
                logger.warning(
                    "%s:embed - Chunk %d failed (%d chars): %s",
                    __name__,
                    chunk.index,
                    chunk.chars,
                    e,
                )
                failures.append({"index": chunk.index, "chars": chunk.chars, "error": str(e)})
                if chunk.is_metadata:
                    raise EmbeddingError(
                        "Metadata chunk embedding failed",
                        details={"chunks_attempted": len(chunks), "failures": failures},
                    ) from e
                continue
            embedded.append(chunk.model_copy(update={"embedding": vector}))

        if not embedded:
            raise EmbeddingError(
                "All embeddings failed",
                details={
                    "chunks_attempted": len(chunks),
                    "text_bytes": sum(c.chars for c in chunks),
                    "failures": failures,
                },
            )

        logger.info(
            "%s:embed - Embedded %d/%d chunks",
            __name__,
            len(embedded),
            len(chunks),
            extra={"model": session.settings.model_name},
        )
        return [chunk.model_copy(update={"index": i}) for i, chunk in enumerate(embedded)]
