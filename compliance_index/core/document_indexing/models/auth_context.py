"""
Authorization context model.

Outcome of the access guard: who is calling and which tenant their
credential implies.

Dependencies: pydantic
System role: Caller identity passed through the pipeline
"""

import uuid

from pydantic import BaseModel


class AuthContext(BaseModel):
    """Authorized caller."""

    authorized: bool = True
    caller_id: uuid.UUID | None = None
    tenant_id_hint: uuid.UUID | None = None

    @property
    def is_interactive(self) -> bool:
        """True for bearer-credential callers, False for system/backfill runs."""
        return self.caller_id is not None

    @classmethod
    def system(cls) -> "AuthContext":
        """Context for operator-secret (backfill) callers."""
        return cls(authorized=True)
