"""API routers."""

from .backfill import router as backfill_router
from .embeddings import router as embeddings_router
from .health import router as health_router

__all__ = [
    "backfill_router",
    "embeddings_router",
    "health_router",
]
