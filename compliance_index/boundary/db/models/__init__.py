"""
Database models package.

Exports:
  - SourceDocumentModel, QueueStatus: Queue entry being indexed
  - DocumentChunkModel: Search index rows
  - UserProfileModel, DocumentModel: Tenant lookup sources
  - AuditLogModel: Audit trail

Dependencies: sqlalchemy, compliance_index.boundary.db.base
System role: Database model definitions for domain entities
"""

from compliance_index.boundary.db.models.audit_log_model import AuditLogModel
from compliance_index.boundary.db.models.document_chunk_model import DocumentChunkModel
from compliance_index.boundary.db.models.source_document_model import QueueStatus, SourceDocumentModel
from compliance_index.boundary.db.models.tenant_models import DocumentModel, UserProfileModel

__all__ = [
    "AuditLogModel",
    "DocumentChunkModel",
    "DocumentModel",
    "QueueStatus",
    "SourceDocumentModel",
    "UserProfileModel",
]
