"""
Page text model.

A unit of routed text before chunking: one PDF page, or the single
page 0 produced by the structured serializer.

Dependencies: pydantic
System role: Hand-off between content routing and chunking
"""

from pydantic import BaseModel, Field


class PageText(BaseModel):
    """Text of one page."""

    page: int = Field(ge=0, description="1-based PDF page number, 0 for serialized text")
    text: str = Field(description="Page text")
