"""
Tenant lookup operations.

Resolves organization ids from user profiles and canonical documents.

Dependencies: sqlalchemy, compliance_index.boundary.db.models
System role: Tenant resolution queries
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_index.boundary.db.CRUD.base_crud import BaseCRUD
from compliance_index.boundary.db.models.tenant_models import DocumentModel, UserProfileModel


class UserProfileCRUD(BaseCRUD[UserProfileModel]):
    """Read operations for user profiles."""

    def __init__(self) -> None:
        super().__init__(UserProfileModel)

    async def get_organization_id(self, session: AsyncSession, user_id: UUID) -> UUID | None:
        """Return the organization of a user, or None if unknown/unassigned."""
        stmt = select(UserProfileModel.organization_id).where(UserProfileModel.id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """Read operations for canonical documents."""

    def __init__(self) -> None:
        super().__init__(DocumentModel)

    async def get_organization_id(self, session: AsyncSession, document_id: UUID) -> UUID | None:
        """Return the organization owning a document, or None."""
        stmt = select(DocumentModel.organization_id).where(DocumentModel.id == document_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


user_profile_crud = UserProfileCRUD()
document_crud = DocumentCRUD()
