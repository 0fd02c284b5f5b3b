"""API-specific dependencies."""

from .dependencies import (
    ServiceCache,
    get_access_guard,
    get_backfill_runner,
    get_indexing_pipeline,
    get_service_cache,
)

__all__ = [
    "ServiceCache",
    "get_access_guard",
    "get_backfill_runner",
    "get_indexing_pipeline",
    "get_service_cache",
]
