"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management

Dependencies: sqlalchemy, compliance_index.configs
System role: Database adapter for queue entries, tenants, chunks and audit log
"""

from compliance_index.boundary.db.base import Base, TimestampMixin, UUIDMixin
from compliance_index.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
]
