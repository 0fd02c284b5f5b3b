"""
HTTP request/response schemas.

Exports: GenerateEmbeddingsRequest, GenerateEmbeddingsResponse, ErrorResponse
"""

from compliance_index.models.common import ErrorResponse
from compliance_index.models.embeddings import GenerateEmbeddingsRequest, GenerateEmbeddingsResponse

__all__ = [
    "ErrorResponse",
    "GenerateEmbeddingsRequest",
    "GenerateEmbeddingsResponse",
]
