"""
Content routing for the indexing pipeline.

Chooses how a document's text is produced by walking an ordered list of
strategies: page-aware PDF extraction for interactive runs on PDF-class
documents, then structured serialization of the parser payload. A
strategy that fails with ExtractionFailure, or yields no pages, hands
over to the next one.

Dependencies: fastapi.concurrency, compliance_index.boundary.aws
System role: Content source selection for the indexing pipeline
"""

import logging
from typing import NamedTuple, Protocol

from fastapi.concurrency import run_in_threadpool

from compliance_index.boundary.aws.s3_client import S3StorageClient
from compliance_index.core.exceptions import ExtractionFailure, NoIndexableContentError

from ..configs import ExtractionBudget
from ..models import AuthContext, PageText, SourceDocument
from .pdf_extraction_task import PdfTextExtractor
from .serialization_task import serialize_extracted_data

logger = logging.getLogger(__name__)


class RoutedContent(NamedTuple):
    """Pages to chunk and the strategy that produced them."""

    pages: list[PageText]
    strategy: str | None

    @property
    def page_count(self) -> int:
        """Number of distinct page numbers."""
        return len({page.page for page in self.pages})


class ContentStrategy(Protocol):
    name: str

    def applies(self, doc: SourceDocument, auth: AuthContext) -> bool: ...

    async def produce(self, doc: SourceDocument) -> list[PageText]: ...


class PdfExtractionStrategy:
    """Full-text extraction of PDF-class documents for interactive callers."""

    name = "pdf_extraction"

    def __init__(
        self,
        storage: S3StorageClient,
        extractor: PdfTextExtractor,
        url_expiry_seconds: int = 300,
    ) -> None:
        self.storage = storage
        self.extractor = extractor
        self.url_expiry_seconds = url_expiry_seconds

    def applies(self, doc: SourceDocument, auth: AuthContext) -> bool:
        # Backfill runs skip model extraction and use the parser payload.
        return doc.is_pdf and auth.is_interactive

    async def produce(self, doc: SourceDocument) -> list[PageText]:
        url = await run_in_threadpool(
            self.storage.create_signed_url,
            doc.storage_bucket,
            doc.storage_path,
            self.url_expiry_seconds,
        )
        return await self.extractor.extract(url)


class StructuredSerializationStrategy:
    """Serialize extracted_data into a single page."""

    name = "structured_serialization"

    def __init__(self, budget: ExtractionBudget) -> None:
        self.budget = budget

    def applies(self, doc: SourceDocument, auth: AuthContext) -> bool:
        return doc.extracted_data is not None

    async def produce(self, doc: SourceDocument) -> list[PageText]:
        return serialize_extracted_data(doc.extracted_data, doc.file_category, self.budget)


class ContentRouter:
    """Run content strategies in order until one yields pages."""

    def __init__(self, strategies: list[ContentStrategy]) -> None:
        """
        Initialize router.

        Args:
            strategies: Strategies in priority order
        """
        self.strategies = strategies

    async def route(self, doc: SourceDocument, auth: AuthContext) -> RoutedContent:
        """
        Produce page text for a document.

        Args:
            doc: Source document with extracted_data loaded
            auth: Caller context (backfill runs are non-interactive)

        Returns:
            RoutedContent: Pages (possibly empty when only the metadata
            chunk can be built) and the producing strategy name

        Raises:
            NoIndexableContentError: No pages and no extracted_data
            StorageError: A read URL could not be issued
        """
        for strategy in self.strategies:
            if not strategy.applies(doc, auth):
                continue
            try:
                pages = await strategy.produce(doc)
            except ExtractionFailure as e:
                logger.warning(
                    "%s:route - %s failed for %s, falling back: %s",
                    __name__,
                    strategy.name,
                    doc.id,
                    e,
                )
                continue

            pages = [page for page in pages if page.text.strip()]
            if pages:
                logger.info(
                    "%s:route - %s produced %d pages",
                    __name__,
                    strategy.name,
                    len(pages),
                    extra={"queue_id": str(doc.id)},
                )
                return RoutedContent(pages, strategy.name)

        if doc.extracted_data is None:
            raise NoIndexableContentError(details={"queue_id": str(doc.id)})

        logger.info(
            "%s:route - No page text for %s, indexing metadata only",
            __name__,
            doc.id,
        )
        return RoutedContent([], None)
