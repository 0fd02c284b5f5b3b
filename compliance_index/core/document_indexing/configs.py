"""
Configuration settings for the document indexing pipeline.

Provides the process-wide extraction budget (chunk sizing, serializer byte
budget, per-document chunk ceiling) plus PDF extraction and embedding model
settings. The chunk ceiling is read only from the operator-controlled
MAX_CHUNKS_PER_DOC environment variable, never from a request.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExtractionBudget(BaseSettings):
    """Immutable sizing limits shared by the serializer, chunker and cap guard."""

    model_config = SettingsConfigDict(
        env_prefix="INDEXING_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    max_chunk_chars: int = Field(
        default=1600,
        gt=0,
        description="Maximum chunk size in characters",
    )
    chunk_overlap: int = Field(
        default=200,
        ge=0,
        description="Overlap between consecutive chunks of one page",
    )
    summary_byte_budget: int = Field(
        default=1500,
        gt=0,
        description="Byte budget for the summary serializer output",
    )
    large_doc_threshold: int = Field(
        default=5000,
        gt=0,
        description="extracted_data JSON size above which the summary serializer is used",
    )
    max_chunks_per_doc: int = Field(
        default=2,
        ge=1,
        validation_alias=AliasChoices("MAX_CHUNKS_PER_DOC"),
        description="Hard cap on chunks embedded per invocation",
    )
    sample_record_limit: int = Field(
        default=50,
        ge=0,
        description="Sample records rendered by the full-fidelity serializer",
    )
    summary_records_min_free: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Share of summary budget that must remain before sample records are added",
    )
    extracted_records_limit: int = Field(
        default=20,
        ge=0,
        description="Records kept when loading extracted_data for indexing",
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> "ExtractionBudget":
        if self.chunk_overlap >= self.max_chunk_chars:
            raise ValueError("chunk_overlap must be smaller than max_chunk_chars")
        return self


class PdfExtractionSettings(BaseSettings):
    """Settings for the document-understanding model used on PDFs."""

    model_config = SettingsConfigDict(
        env_prefix="PDF_EXTRACTION_",
        case_sensitive=False,
        extra="ignore",
    )

    model_id: str = Field(
        default="gemini-2.5-flash",
        description="Chat model used for page-aware PDF text extraction",
    )
    max_output_tokens: int = Field(
        default=8192,
        description="Upper bound on generated tokens",
    )
    timeout_seconds: float = Field(
        default=180.0,
        gt=0,
        description="Hard timeout for one extraction call",
    )


class EmbeddingSettings(BaseSettings):
    """Settings for the local sentence embedding model."""

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    model_name: str = Field(
        default="thenlper/gte-small",
        description="sentence-transformers model id (mean pooled)",
    )
    dimension: int = Field(
        default=384,
        description="Vector size; must match the document_chunks.embedding column",
    )
    device: str = Field(
        default="cpu",
        description="Torch device for inference",
    )


@lru_cache
def get_extraction_budget() -> ExtractionBudget:
    """
    Get cached extraction budget.

    Returns:
        ExtractionBudget: Singleton budget loaded from environment
    """
    return ExtractionBudget()


@lru_cache
def get_pdf_extraction_settings() -> PdfExtractionSettings:
    """Get cached PDF extraction settings."""
    return PdfExtractionSettings()


@lru_cache
def get_embedding_settings() -> EmbeddingSettings:
    """Get cached embedding settings."""
    return EmbeddingSettings()
