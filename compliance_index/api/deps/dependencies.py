"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived clients (storage,
PDF extractor, token verifier) are cached process-wide; the database
session and embedding session are per request.

Dependencies: compliance_index.configs, compliance_index.boundary, compliance_index.core
System role: DI container for service injection
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_index.boundary.aws.s3_client import S3StorageClient
from compliance_index.boundary.db import get_async_db, get_async_session_factory
from compliance_index.boundary.identity import IdentityProvider
from compliance_index.configs import get_settings
from compliance_index.core.document_indexing.backfill import BackfillRunner
from compliance_index.core.document_indexing.configs import get_pdf_extraction_settings
from compliance_index.core.document_indexing.entrypoint import IndexingPipeline
from compliance_index.core.document_indexing.tasks import AccessGuard, PdfTextExtractor


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self):
        self._storage_client = None
        self._pdf_extractor = None
        self._identity_provider = None

    @property
    def storage_client(self) -> S3StorageClient:
        """Get cached storage client."""
        if self._storage_client is None:
            storage = get_settings().storage
            self._storage_client = S3StorageClient(
                region=storage.region,
                endpoint_url=storage.endpoint_url,
            )
        return self._storage_client

    @property
    def pdf_extractor(self) -> PdfTextExtractor:
        """Get cached PDF extractor (the chat model is built on first call)."""
        if self._pdf_extractor is None:
            self._pdf_extractor = PdfTextExtractor(get_pdf_extraction_settings())
        return self._pdf_extractor

    @property
    def identity_provider(self) -> IdentityProvider:
        """Get cached bearer token verifier."""
        if self._identity_provider is None:
            auth = get_settings().auth
            self._identity_provider = IdentityProvider(
                jwt_secret=auth.jwt_secret,
                algorithms=auth.jwt_algorithms,
                audience=auth.jwt_audience,
            )
        return self._identity_provider

    def build_pipeline(self, db: AsyncSession) -> IndexingPipeline:
        """Build an indexing pipeline bound to a database session."""
        return IndexingPipeline(
            session=db,
            storage=self.storage_client,
            extractor=self.pdf_extractor,
            signed_url_expiry=get_settings().storage.signed_url_expiry,
        )

    def clear(self) -> None:
        """Clear all cached instances."""
        self._storage_client = None
        self._pdf_extractor = None
        self._identity_provider = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_access_guard(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> AccessGuard:
    """
    Get access guard instance.

    Args:
        db: Async database session (injected via Depends)
        cache: Service cache (injected via Depends)

    Returns:
        AccessGuard: Guard using the configured operator secret
    """
    return AccessGuard(
        session=db,
        identity_provider=cache.identity_provider,
        internal_secret=get_settings().auth.internal_secret,
    )


def get_indexing_pipeline(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> IndexingPipeline:
    """
    Get indexing pipeline instance.

    Args:
        db: Async database session (injected via Depends)
        cache: Service cache (injected via Depends)

    Returns:
        IndexingPipeline: Pipeline bound to the request session
    """
    return cache.build_pipeline(db)


def get_backfill_runner(cache: ServiceCache = Depends(get_service_cache)) -> BackfillRunner:
    """
    Get backfill runner instance.

    Each backfilled document is indexed in its own session.

    Returns:
        BackfillRunner: Runner using the shared session factory
    """
    return BackfillRunner(
        session_factory=get_async_session_factory(),
        pipeline_factory=cache.build_pipeline,
    )
