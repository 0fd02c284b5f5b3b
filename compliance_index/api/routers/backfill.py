"""
Backfill API endpoint.

Routes: POST /backfill-embeddings

Dependencies: compliance_index.core.document_indexing.backfill
System role: Operator bulk indexing HTTP API
"""

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from compliance_index.api.deps import get_access_guard, get_backfill_runner
from compliance_index.api.routers.router_utils import read_json_body
from compliance_index.core.document_indexing.backfill import BackfillRequest, BackfillRunner
from compliance_index.core.document_indexing.tasks import AccessGuard
from compliance_index.core.exceptions import RequestValidationError
from compliance_index.models import ErrorResponse

router = APIRouter(tags=["backfill"])


@router.post(
    "/backfill-embeddings",
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def backfill_embeddings(
    request: Request,
    guard: AccessGuard = Depends(get_access_guard),
    runner: BackfillRunner = Depends(get_backfill_runner),
) -> dict:
    """
    Index parsed documents that have no chunks yet.

    Operator secret only. Body is optional:
    {batch_size?, dry_run?, category?, state_code?}.

    Returns:
        dict: Candidate list for dry runs, otherwise per-entry results with
        succeeded/failed/total_chunks/remaining counts
    """
    guard.authorize_operator(request.headers)

    payload = await read_json_body(request)
    try:
        options = BackfillRequest.model_validate(payload or {})
    except ValidationError as e:
        raise RequestValidationError("Invalid backfill options", details={"errors": e.errors()}) from e

    report = await runner.run(options)
    return report.to_response()
