"""
Page-aware PDF text extraction via a document-understanding chat model.

Sends the PDF (by signed URL) with an instruction to return every page's
full text as a JSON array, then validates the reply into PageText. Any
failure surfaces as ExtractionFailure so the router can fall back to the
structured payload.

Dependencies: langchain_google_genai, langchain_core, asyncio, json
System role: PDF content source for the indexing pipeline
"""

import asyncio
import json
import logging
import re
from typing import Any

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import TypeAdapter, ValidationError

from compliance_index.core.exceptions import ExtractionFailure

from ..configs import PdfExtractionSettings
from ..models import PageText

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """Extract ALL text from this PDF document.

Return a JSON array where each element represents one page:
[
  { "page": 1, "text": "full text content of page 1..." },
  { "page": 2, "text": "full text content of page 2..." }
]

RULES:
- Include ALL text: headers, footers, tables, conditions, notes, everything
- Preserve paragraph structure (use newlines)
- For tables, render as readable text rows
- Page numbers must match the actual PDF page numbers
- Do not summarize or skip any content
- Return ONLY the JSON array, no markdown fences or explanation"""

_FENCE_OPEN = re.compile(r"^```(?:json)?\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")

_PAGES = TypeAdapter(list[PageText])


def strip_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    text = text.strip()
    if text.startswith("```"):
        text = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text))
    return text


def _response_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return ""


def parse_pages(raw: str) -> list[PageText]:
    """
    Parse a model reply into non-blank pages.

    Args:
        raw: Model reply text

    Returns:
        list[PageText]: Pages with non-whitespace text

    Raises:
        ExtractionFailure: If the reply is not a JSON array of pages
    """
    try:
        payload = json.loads(strip_fences(raw))
        pages = _PAGES.validate_python(payload)
    except (json.JSONDecodeError, ValidationError) as e:
        raise ExtractionFailure(
            "PDF extraction returned malformed output",
            details={"error": str(e), "preview": raw[:200]},
        ) from e
    return [page for page in pages if page.text.strip()]


class PdfTextExtractor:
    """Extract page text from a PDF with one model call."""

    def __init__(
        self,
        settings: PdfExtractionSettings,
        model: BaseChatModel | None = None,
    ) -> None:
        """
        Initialize extractor.

        Args:
            settings: Model id, output token cap and hard timeout
            model: Chat model override; built from settings on first use
        """
        self.settings = settings
        self._model = model

    @property
    def model(self) -> BaseChatModel:
        if self._model is None:
            self._model = ChatGoogleGenerativeAI(
                model=self.settings.model_id,
                temperature=0,
                max_output_tokens=self.settings.max_output_tokens,
            )
        return self._model

    async def extract(self, url: str) -> list[PageText]:
        """
        Extract all text of the PDF at `url`, one entry per page.

        Args:
            url: Time-limited read URL of the PDF

        Returns:
            list[PageText]: Non-blank pages in document order

        Raises:
            ExtractionFailure: On timeout, model error or malformed reply
        """
        message = HumanMessage(
            content=[
                {
                    "type": "file",
                    "source_type": "url",
                    "url": url,
                    "mime_type": "application/pdf",
                },
                {"type": "text", "text": EXTRACTION_PROMPT},
            ]
        )

        try:
            response = await asyncio.wait_for(
                self.model.ainvoke([message]),
                timeout=self.settings.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ExtractionFailure(
                "PDF extraction timed out",
                details={"timeout_seconds": self.settings.timeout_seconds},
            ) from e
        except Exception as e:
            raise ExtractionFailure(
                f"PDF extraction call failed: {type(e).__name__}",
                details={"error": str(e)},
            ) from e

        text = _response_text(response.content)
        if not text.strip():
            raise ExtractionFailure("No text in extraction response")

        pages = parse_pages(text)
        logger.info(
            "%s:extract - Extracted %d pages",
            __name__,
            len(pages),
            extra={"model_id": self.settings.model_id},
        )
        return pages
