"""
Page-aware text chunking.

Splits routed page text into bounded, overlapping chunks. Long pages are
cut at the latest paragraph, sentence or word boundary past the middle of
the window so concepts that straddle a boundary survive in at least one
chunk.

Dependencies: langchain_text_splitters, compliance_index.core.document_indexing.models
System role: Chunking stage of the indexing pipeline
"""

import logging

from langchain_text_splitters import TextSplitter

from ..configs import ExtractionBudget
from ..models import Chunk, PageText

logger = logging.getLogger(__name__)

# Index 0 is reserved for the metadata chunk.
FIRST_CONTENT_INDEX = 1

# (separator, characters of the separator kept at the end of the chunk)
_BREAKS = (("\n\n", 2), (". ", 2), (" ", 1))


def _find_break(text: str, start: int, end: int, max_chars: int) -> int:
    """Latest acceptable split point before `end`, or `end` itself."""
    floor = start + max_chars // 2
    for separator, keep in _BREAKS:
        pos = text.rfind(separator, start, end)
        if pos > floor:
            return pos + keep
    return end


def split_text(text: str, max_chars: int, overlap: int) -> list[str]:
    """
    Split one page of text into overlapping windows.

    Args:
        text: Page text
        max_chars: Maximum characters per window
        overlap: Characters shared by consecutive windows

    Returns:
        list[str]: Non-empty stripped windows in order
    """
    text = text.strip()
    if not text:
        return []
    if len(text) <= max_chars:
        return [text]

    pieces: list[str] = []
    start = 0
    length = len(text)

    while start < length:
        end = min(start + max_chars, length)
        if end < length:
            end = _find_break(text, start, end, max_chars)

        piece = text[start:end].strip()
        if piece:
            pieces.append(piece)

        if end >= length:
            break

        next_start = end - overlap
        # Always move forward, even when the window was cut short.
        start = next_start if next_start > start else end

    return pieces


class BoundaryTextSplitter(TextSplitter):
    """TextSplitter that cuts at paragraph, sentence or word breaks past mid-window."""

    def split_text(self, text: str) -> list[str]:
        return split_text(text, self._chunk_size, self._chunk_overlap)


class ChunkingTask:
    """Build content chunks from routed pages."""

    def __init__(self, budget: ExtractionBudget) -> None:
        """
        Initialize with chunk sizing from the extraction budget.

        Args:
            budget: Provides max_chunk_chars and chunk_overlap
        """
        self.max_chars = budget.max_chunk_chars
        self.overlap = budget.chunk_overlap
        self._splitter = BoundaryTextSplitter(
            chunk_size=self.max_chars,
            chunk_overlap=self.overlap,
        )

    def chunk(self, pages: list[PageText]) -> list[Chunk]:
        """
        Chunk pages in order, numbering content chunks from 1.

        Blank pages produce no chunks.

        Args:
            pages: Routed page text

        Returns:
            list[Chunk]: Content chunks tagged with their source page
        """
        chunks: list[Chunk] = []
        index = FIRST_CONTENT_INDEX

        for page in pages:
            for piece in self._splitter.split_text(page.text):
                chunks.append(Chunk(index=index, text=piece, source_page=page.page))
                index += 1

        logger.info(
            "%s:chunk - Built %d chunks from %d pages",
            __name__,
            len(chunks),
            len(pages),
            extra={"max_chars": self.max_chars, "overlap": self.overlap},
        )
        return chunks
