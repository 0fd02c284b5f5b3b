"""
CRUD operations package.

Exports CRUD classes and their module-level singletons.
"""

from compliance_index.boundary.db.CRUD.audit_crud import AuditCRUD, audit_crud
from compliance_index.boundary.db.CRUD.base_crud import BaseCRUD
from compliance_index.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from compliance_index.boundary.db.CRUD.source_document_crud import (
    SourceDocumentCRUD,
    source_document_crud,
    truncate_records,
)
from compliance_index.boundary.db.CRUD.tenant_crud import (
    DocumentCRUD,
    UserProfileCRUD,
    document_crud,
    user_profile_crud,
)

__all__ = [
    "AuditCRUD",
    "BaseCRUD",
    "ChunkCRUD",
    "DocumentCRUD",
    "SourceDocumentCRUD",
    "UserProfileCRUD",
    "audit_crud",
    "chunk_crud",
    "document_crud",
    "source_document_crud",
    "truncate_records",
    "user_profile_crud",
]
