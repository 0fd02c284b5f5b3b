"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, exception handlers and
middleware, and configures logging in the lifespan.

Dependencies: fastapi, compliance_index.api, compliance_index.observability, compliance_index.configs
System role: Application initialization and configuration
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from compliance_index import __version__
from compliance_index.api.routers import backfill_router, embeddings_router, health_router
from compliance_index.configs import get_settings
from compliance_index.core.exceptions import IndexingException
from compliance_index.observability.logger import configure_logging
from compliance_index.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Embedding generation failed. Please try again or contact support."


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configures logging on startup. Models and clients are created lazily
    on first use by the dependency container.
    """
    configure_logging(get_settings().log_level)
    logger.info("Application startup: logging configured")

    yield

    logger.info("Application shutdown")


async def indexing_exception_handler(request: Request, exc: IndexingException) -> JSONResponse:
    """Map domain exceptions to their HTTP status and public message."""
    if exc.status_code >= 500:
        logger.error(
            "%s:indexing_exception_handler - %s %s: %s",
            __name__,
            request.method,
            request.url.path,
            exc,
            extra={"error_type": type(exc).__name__},
        )
    else:
        logger.info(
            "%s:indexing_exception_handler - %s %s -> %d: %s",
            __name__,
            request.method,
            request.url.path,
            exc.status_code,
            exc,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.public_message},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return a generic 500 without leaking internals."""
    logger.exception(
        "%s:unhandled_exception_handler - %s %s",
        __name__,
        request.method,
        request.url.path,
        extra={"error_type": type(exc).__name__},
    )
    return JSONResponse(status_code=500, content={"success": False, "error": GENERIC_ERROR})


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    app = FastAPI(
        title="Compliance Index API",
        description="Indexes parsed compliance documents into a tenant-scoped vector search index",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_exception_handler(IndexingException, indexing_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Add observability middleware (added first = last to execute)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(embeddings_router)
    app.include_router(backfill_router)
    app.include_router(health_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "compliance_index.api.main:app",
        host="localhost",
        port=8082,
        reload=True,
    )
