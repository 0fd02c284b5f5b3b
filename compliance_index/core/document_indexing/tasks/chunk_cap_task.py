"""
Per-document chunk ceiling.

The embedding backend has a hard per-invocation memory ceiling, so the
number of chunks embedded in one run is capped. Truncation keeps the
earliest chunks and is reported back to the caller.
"""

import logging
from typing import NamedTuple

from ..models import Chunk

logger = logging.getLogger(__name__)


class CapResult(NamedTuple):
    """Chunks that survived the cap and whether any were dropped."""

    chunks: list[Chunk]
    truncated: bool
    precap_count: int


def apply_chunk_cap(chunks: list[Chunk], max_chunks: int) -> CapResult:
    """
    Keep at most `max_chunks` chunks, earliest first.

    Args:
        chunks: Metadata chunk followed by content chunks
        max_chunks: Operator-configured ceiling (>= 1)

    Returns:
        CapResult: Capped list, truncation flag and pre-cap count

    Raises:
        ValueError: If max_chunks is below 1 (the metadata chunk must survive)
    """
    if max_chunks < 1:
        raise ValueError("max_chunks must be at least 1")

    precap_count = len(chunks)
    if precap_count <= max_chunks:
        return CapResult(list(chunks), False, precap_count)

    logger.info(
        "%s:apply_chunk_cap - Capped %d chunks to %d",
        __name__,
        precap_count,
        max_chunks,
    )
    return CapResult(chunks[:max_chunks], True, precap_count)
