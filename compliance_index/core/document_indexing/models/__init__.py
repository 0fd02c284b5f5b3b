"""
Models for the document indexing pipeline.

Exports: AuthContext, Chunk, PageText, SourceDocument, IndexingResult and
the extracted_data variants.
"""

from .auth_context import AuthContext
from .chunk import METADATA_SECTION, Chunk
from .extracted_data import (
    DmrData,
    ExtractedData,
    GenericData,
    LabData,
    PermitData,
    parse_extracted_data,
)
from .indexing_result import IndexingResult
from .page import PageText
from .source_document import SourceDocument

__all__ = [
    "AuthContext",
    "Chunk",
    "DmrData",
    "ExtractedData",
    "GenericData",
    "IndexingResult",
    "LabData",
    "METADATA_SECTION",
    "PageText",
    "PermitData",
    "SourceDocument",
    "parse_extracted_data",
]
