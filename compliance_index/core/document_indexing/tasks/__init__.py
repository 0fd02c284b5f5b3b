"""
Task modules for the document indexing pipeline.

Exports: AccessGuard, SourceResolver, ContentRouter, PdfTextExtractor,
ChunkingTask, EmbeddingTask, IndexWriter and the stage helpers
"""

from .access_guard import AccessGuard
from .chunk_cap_task import CapResult, apply_chunk_cap
from .chunking_task import BoundaryTextSplitter, ChunkingTask, split_text
from .content_router import (
    ContentRouter,
    ContentStrategy,
    PdfExtractionStrategy,
    RoutedContent,
    StructuredSerializationStrategy,
)
from .embedding_task import EmbeddingSession, EmbeddingTask, embedding_session
from .index_writer import IndexWriter
from .metadata_chunk_task import build_metadata_chunk
from .pdf_extraction_task import PdfTextExtractor
from .serialization_task import (
    serialize_extracted_data,
    serialize_full_fidelity,
    serialize_summary,
)
from .source_resolver import SourceResolver

__all__ = [
    "AccessGuard",
    "BoundaryTextSplitter",
    "CapResult",
    "ChunkingTask",
    "ContentRouter",
    "ContentStrategy",
    "EmbeddingSession",
    "EmbeddingTask",
    "IndexWriter",
    "PdfExtractionStrategy",
    "PdfTextExtractor",
    "RoutedContent",
    "SourceResolver",
    "StructuredSerializationStrategy",
    "apply_chunk_cap",
    "build_metadata_chunk",
    "embedding_session",
    "serialize_extracted_data",
    "serialize_full_fidelity",
    "serialize_summary",
    "split_text",
]
