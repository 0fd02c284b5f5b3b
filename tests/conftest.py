"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory async database, queue entry builders, fake embedding
model and fake PDF extractor
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import uuid
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from compliance_index.core.document_indexing.configs import EmbeddingSettings, ExtractionBudget

EMBEDDING_DIM = 384


class FakeEncoder:
    """Stand-in for a sentence-transformers model."""

    def __init__(self, dimension: int = EMBEDDING_DIM, fail_on: set[str] | None = None) -> None:
        self.dimension = dimension
        self.fail_on = fail_on or set()
        self.calls: list[str] = []

    def encode(self, texts: list[str], normalize_embeddings: bool = False) -> list[list[float]]:
        text = texts[0]
        self.calls.append(text)
        if any(marker in text for marker in self.fail_on):
            raise RuntimeError("inference failed")
        return [[0.01] * self.dimension]


@pytest.fixture
def budget() -> ExtractionBudget:
    """Default budget with a roomy chunk cap."""
    return ExtractionBudget(max_chunks_per_doc=50)


@pytest.fixture
def embedding_settings() -> EmbeddingSettings:
    """Embedding settings matching the fake encoder."""
    return EmbeddingSettings(dimension=EMBEDDING_DIM)


@pytest.fixture
def fake_encoder() -> FakeEncoder:
    """Encoder that always succeeds."""
    return FakeEncoder()


@pytest.fixture
def mock_extractor() -> MagicMock:
    """PDF extractor whose extract() is an AsyncMock."""
    extractor = MagicMock()
    extractor.extract = AsyncMock(return_value=[])
    return extractor


@pytest.fixture
def mock_storage() -> MagicMock:
    """Storage client returning a fixed signed URL."""
    storage = MagicMock()
    storage.create_signed_url.return_value = "https://storage.example/signed/permit.pdf"
    return storage


@pytest.fixture
async def db_engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine shared by every session of the test
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    from compliance_index.boundary.db import models  # noqa: F401
    from compliance_index.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory bound to the test engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_async_db(session_factory):
    """
    Create a session on the in-memory database.

    Yields:
        AsyncSession: Test database session
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


async def add_queue_entry(session, **overrides: Any):
    """Insert a file_processing_queue row and commit it."""
    from compliance_index.boundary.db.models import QueueStatus, SourceDocumentModel

    values: dict[str, Any] = {
        "id": uuid.uuid4(),
        "storage_bucket": "documents",
        "storage_path": "org/permit.pdf",
        "file_name": "permit.pdf",
        "file_category": "npdes_permit",
        "state_code": "WV",
        "status": QueueStatus.PARSED,
        "uploaded_by": None,
        "document_id": None,
        "extracted_data": {"permit_number": "WV0001234", "document_type": "NPDES Permit"},
    }
    values.update(overrides)
    entry = SourceDocumentModel(**values)
    session.add(entry)
    await session.commit()
    return entry


async def add_user_profile(session, organization_id: uuid.UUID | None, user_id: uuid.UUID | None = None):
    """Insert a user profile and commit it."""
    from compliance_index.boundary.db.models import UserProfileModel

    profile = UserProfileModel(id=user_id or uuid.uuid4(), organization_id=organization_id)
    session.add(profile)
    await session.commit()
    return profile


async def add_document(session, organization_id: uuid.UUID | None, document_id: uuid.UUID | None = None):
    """Insert a canonical document and commit it."""
    from compliance_index.boundary.db.models import DocumentModel

    document = DocumentModel(id=document_id or uuid.uuid4(), organization_id=organization_id)
    session.add(document)
    await session.commit()
    return document


@pytest.fixture
def make_queue_entry():
    """Factory fixture: await make_queue_entry(session, **overrides)."""
    return add_queue_entry


@pytest.fixture
def make_user_profile():
    """Factory fixture: await make_user_profile(session, organization_id, user_id=None)."""
    return add_user_profile


@pytest.fixture
def make_document():
    """Factory fixture: await make_document(session, organization_id, document_id=None)."""
    return add_document


@pytest.fixture
def make_encoder():
    """Factory fixture: make_encoder(dimension=384, fail_on=None) -> FakeEncoder."""
    return FakeEncoder
