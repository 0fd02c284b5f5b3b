"""
Tenant lookup ORM models.

Read-only views over the organization-scoped tables owned by the
dashboard: user profiles and canonical documents. Both carry the
organization id used for index isolation.

Dependencies: sqlalchemy, compliance_index.boundary.db.base
System role: Tenant resolution sources
"""

import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from compliance_index.boundary.db.base import Base, UUIDMixin


class UserProfileModel(Base, UUIDMixin):
    """User profile keyed by identity-provider user id."""

    __tablename__ = "user_profiles"

    organization_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)


class DocumentModel(Base, UUIDMixin):
    """Canonical document a queue entry may be linked to."""

    __tablename__ = "documents"

    organization_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    title: Mapped[str | None] = mapped_column(String(512), nullable=True)
