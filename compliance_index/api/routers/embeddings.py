"""
Embedding generation API endpoint.

Routes: POST /generate-embeddings

Dependencies: compliance_index.core.document_indexing, compliance_index.models
System role: Indexing HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from compliance_index.api.deps import get_access_guard, get_indexing_pipeline
from compliance_index.api.routers.router_utils import read_json_body
from compliance_index.core.document_indexing.entrypoint import IndexingPipeline
from compliance_index.core.document_indexing.tasks import AccessGuard
from compliance_index.core.exceptions import RequestValidationError
from compliance_index.models import (
    ErrorResponse,
    GenerateEmbeddingsRequest,
    GenerateEmbeddingsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["embeddings"])


@router.post(
    "/generate-embeddings",
    response_model=GenerateEmbeddingsResponse,
    response_model_exclude_unset=True,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def generate_embeddings(
    request: Request,
    guard: AccessGuard = Depends(get_access_guard),
    pipeline: IndexingPipeline = Depends(get_indexing_pipeline),
) -> GenerateEmbeddingsResponse:
    """
    Index one source document into the tenant-scoped search index.

    Accepts either an operator secret (X-Internal-Secret) or a user bearer
    token. Re-indexing replaces the document's previous chunks.

    Args:
        request: Raw request (headers for auth, JSON body {queue_id})
        guard: Injected AccessGuard
        pipeline: Injected IndexingPipeline

    Returns:
        GenerateEmbeddingsResponse: Chunk/page counts and cap information

    Raises:
        AuthorizationError(401): No acceptable credential
        RequestValidationError(400): Missing queue_id
        DocumentNotFoundError(404): Unknown queue entry
        StateConflictError(409): Entry not parsed/embedded
    """
    auth = await guard.authorize(request.headers)

    payload = await read_json_body(request)
    try:
        body = GenerateEmbeddingsRequest.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError("Missing queue_id", details={"errors": e.errors()}) from e

    result = await pipeline.run(body.queue_id, auth)
    return GenerateEmbeddingsResponse(**result.to_response())
