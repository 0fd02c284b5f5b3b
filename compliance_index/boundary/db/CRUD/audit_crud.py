"""
Audit log CRUD operations.

Dependencies: sqlalchemy, compliance_index.boundary.db.models
System role: Append-only audit persistence
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from compliance_index.boundary.db.CRUD.base_crud import BaseCRUD
from compliance_index.boundary.db.models.audit_log_model import AuditLogModel


class AuditCRUD(BaseCRUD[AuditLogModel]):
    """Append audit entries."""

    def __init__(self) -> None:
        super().__init__(AuditLogModel)

    async def append(
        self,
        session: AsyncSession,
        user_id: UUID,
        action: str,
        module: str,
        table_name: str | None = None,
        record_id: UUID | None = None,
        description: str | None = None,
    ) -> AuditLogModel:
        """
        Add an audit entry to the current transaction.

        Args:
            session: Async database session
            user_id: Acting user
            action: Action name
            module: Functional area
            table_name: Affected table
            record_id: Affected record
            description: Free-form (usually JSON) description

        Returns:
            The pending AuditLogModel
        """
        entry = AuditLogModel(
            user_id=user_id,
            action=action,
            module=module,
            table_name=table_name,
            record_id=record_id,
            description=description,
        )
        session.add(entry)
        await session.flush()
        return entry


audit_crud = AuditCRUD()
