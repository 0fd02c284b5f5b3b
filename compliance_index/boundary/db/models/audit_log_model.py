"""
Audit log ORM model.

Append-only record of user-triggered actions. The indexing service writes
one row per interactive indexing run.

Dependencies: sqlalchemy, compliance_index.boundary.db.base
System role: Audit trail persistence
"""

import uuid

from sqlalchemy import String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from compliance_index.boundary.db.base import Base, TimestampMixin, UUIDMixin


class AuditLogModel(Base, UUIDMixin, TimestampMixin):
    """Single audit entry."""

    __tablename__ = "audit_log"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    module: Mapped[str] = mapped_column(String(64), nullable=False)
    table_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    record_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
