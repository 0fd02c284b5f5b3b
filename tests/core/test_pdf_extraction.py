"""Tests for PDF text extraction and content routing.

Tests:
- Reply parsing (fences, blank pages, malformed JSON, wrong shape)
- Timeout and model errors surface as ExtractionFailure
- Router strategy order and fallbacks
"""

import asyncio
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage

from compliance_index.core.document_indexing.configs import ExtractionBudget, PdfExtractionSettings
from compliance_index.core.document_indexing.models import AuthContext, PageText, SourceDocument
from compliance_index.core.document_indexing.tasks import (
    ContentRouter,
    PdfExtractionStrategy,
    PdfTextExtractor,
    StructuredSerializationStrategy,
)
from compliance_index.core.document_indexing.tasks.pdf_extraction_task import parse_pages, strip_fences
from compliance_index.core.exceptions import ExtractionFailure, NoIndexableContentError, StorageError

PAGES_JSON = '[{"page": 1, "text": "Part I. Effluent limits"}, {"page": 2, "text": "  "}, {"page": 3, "text": "Part III"}]'


def make_doc(**overrides) -> SourceDocument:
    values = {
        "id": uuid.uuid4(),
        "storage_bucket": "documents",
        "storage_path": "org/permit.pdf",
        "file_name": "permit.pdf",
        "file_category": "npdes_permit",
        "status": "parsed",
        "extracted_data": {"permit_number": "WV0001234"},
    }
    values.update(overrides)
    return SourceDocument(**values)


def interactive() -> AuthContext:
    return AuthContext(caller_id=uuid.uuid4(), tenant_id_hint=uuid.uuid4())


def mock_model(content) -> MagicMock:
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content=content))
    return model


class TestParsePages:
    """Model reply parsing."""

    def test_strip_json_fence(self) -> None:
        """```json fences are removed."""
        assert strip_fences('```json\n[{"page": 1}]\n```') == '[{"page": 1}]'

    def test_strip_bare_fence(self) -> None:
        """Bare ``` fences are removed."""
        assert strip_fences("```\n[]\n```") == "[]"

    def test_drops_blank_pages(self) -> None:
        """Whitespace-only pages are filtered out."""
        pages = parse_pages(PAGES_JSON)

        assert [p.page for p in pages] == [1, 3]

    def test_malformed_json(self) -> None:
        """Non-JSON replies raise ExtractionFailure."""
        with pytest.raises(ExtractionFailure):
            parse_pages("Here is the text of your PDF:")

    def test_wrong_shape(self) -> None:
        """JSON that is not a page list raises ExtractionFailure."""
        with pytest.raises(ExtractionFailure):
            parse_pages('{"page": 1, "text": "x"}')


class TestPdfTextExtractor:
    """Extraction call handling."""

    @pytest.mark.asyncio
    async def test_extracts_fenced_reply(self) -> None:
        """Fenced replies are parsed into pages."""
        model = mock_model(f"```json\n{PAGES_JSON}\n```")
        extractor = PdfTextExtractor(PdfExtractionSettings(), model=model)

        pages = await extractor.extract("https://storage.example/signed")

        assert [p.text for p in pages] == ["Part I. Effluent limits", "Part III"]
        message = model.ainvoke.call_args.args[0][0]
        assert message.content[0]["url"] == "https://storage.example/signed"
        assert message.content[0]["mime_type"] == "application/pdf"
        assert "Do not summarize or skip any content" in message.content[1]["text"]

    @pytest.mark.asyncio
    async def test_list_content_blocks(self) -> None:
        """Replies given as content blocks are joined."""
        model = mock_model([{"type": "text", "text": PAGES_JSON}])
        extractor = PdfTextExtractor(PdfExtractionSettings(), model=model)

        pages = await extractor.extract("https://storage.example/signed")

        assert len(pages) == 2

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """Calls exceeding the hard timeout fail."""

        async def slow(_messages):
            await asyncio.sleep(1)

        model = MagicMock()
        model.ainvoke = slow
        extractor = PdfTextExtractor(PdfExtractionSettings(timeout_seconds=0.01), model=model)

        with pytest.raises(ExtractionFailure, match="timed out"):
            await extractor.extract("https://storage.example/signed")

    @pytest.mark.asyncio
    async def test_model_error(self) -> None:
        """Provider errors are wrapped."""
        model = MagicMock()
        model.ainvoke = AsyncMock(side_effect=RuntimeError("quota exceeded"))
        extractor = PdfTextExtractor(PdfExtractionSettings(), model=model)

        with pytest.raises(ExtractionFailure):
            await extractor.extract("https://storage.example/signed")

    @pytest.mark.asyncio
    async def test_empty_reply(self) -> None:
        """A reply without text fails."""
        extractor = PdfTextExtractor(PdfExtractionSettings(), model=mock_model(""))

        with pytest.raises(ExtractionFailure):
            await extractor.extract("https://storage.example/signed")


class TestContentRouter:
    """Strategy ordering and fallbacks."""

    @pytest.fixture
    def router(self, mock_storage, mock_extractor) -> ContentRouter:
        return ContentRouter(
            [
                PdfExtractionStrategy(mock_storage, mock_extractor),
                StructuredSerializationStrategy(ExtractionBudget()),
            ]
        )

    @pytest.mark.asyncio
    async def test_interactive_pdf_uses_extraction(self, router, mock_storage, mock_extractor) -> None:
        """Interactive PDF calls get page-aware extraction."""
        mock_extractor.extract.return_value = [PageText(page=1, text="a"), PageText(page=2, text="b")]

        routed = await router.route(make_doc(), interactive())

        assert routed.strategy == "pdf_extraction"
        assert routed.page_count == 2
        mock_storage.create_signed_url.assert_called_once_with("documents", "org/permit.pdf", 300)

    @pytest.mark.asyncio
    async def test_backfill_skips_extraction(self, router, mock_storage, mock_extractor) -> None:
        """System callers never trigger model extraction."""
        routed = await router.route(make_doc(), AuthContext.system())

        assert routed.strategy == "structured_serialization"
        assert routed.pages[0].page == 0
        mock_extractor.extract.assert_not_called()
        mock_storage.create_signed_url.assert_not_called()

    @pytest.mark.asyncio
    async def test_category_marks_pdf_class(self, router, mock_extractor) -> None:
        """npdes_permit entries are PDF-class whatever the file name."""
        mock_extractor.extract.return_value = [PageText(page=1, text="a")]

        routed = await router.route(make_doc(file_name="permit.PDFX"), interactive())

        assert routed.strategy == "pdf_extraction"

    @pytest.mark.asyncio
    async def test_non_pdf_uses_serializer(self, router, mock_extractor) -> None:
        """Spreadsheets go straight to the serializer."""
        doc = make_doc(file_name="results.xlsx", file_category="lab_data")

        routed = await router.route(doc, interactive())

        assert routed.strategy == "structured_serialization"
        mock_extractor.extract.assert_not_called()

    @pytest.mark.asyncio
    async def test_extraction_failure_falls_back(self, router, mock_extractor) -> None:
        """ExtractionFailure hands over to the serializer."""
        mock_extractor.extract.side_effect = ExtractionFailure("timed out")

        routed = await router.route(make_doc(), interactive())

        assert routed.strategy == "structured_serialization"

    @pytest.mark.asyncio
    async def test_extraction_failure_without_payload(self, router, mock_extractor) -> None:
        """No fallback content escalates to NoIndexableContentError."""
        mock_extractor.extract.side_effect = ExtractionFailure("timed out")

        with pytest.raises(NoIndexableContentError):
            await router.route(make_doc(extracted_data=None), interactive())

    @pytest.mark.asyncio
    async def test_empty_payload_indexes_metadata_only(self, router) -> None:
        """An empty but present payload yields no pages without failing."""
        routed = await router.route(make_doc(file_name="x.csv", file_category="other", extracted_data={}), interactive())

        assert routed.pages == []
        assert routed.strategy is None

    @pytest.mark.asyncio
    async def test_storage_error_propagates(self, router, mock_storage) -> None:
        """Signed URL failures are not recovered."""
        mock_storage.create_signed_url.side_effect = StorageError("Failed to get signed URL")

        with pytest.raises(StorageError):
            await router.route(make_doc(), interactive())
