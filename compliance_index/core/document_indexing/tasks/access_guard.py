"""
Request authorization for the indexing endpoints.

Two credentials are accepted: the operator secret (system/backfill
callers, no user or tenant) and an identity-provider bearer token, whose
user must have a profile row; the profile's organization becomes the
tenant hint.

Dependencies: hmac, sqlalchemy, compliance_index.boundary.identity
System role: Access control in front of the indexing pipeline
"""

import hmac
import logging
from typing import Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from compliance_index.boundary.db.CRUD import user_profile_crud
from compliance_index.boundary.identity import IdentityProvider
from compliance_index.core.exceptions import AuthorizationError

from ..models import AuthContext

logger = logging.getLogger(__name__)

INTERNAL_SECRET_HEADER = "x-internal-secret"
AUTHORIZATION_HEADER = "authorization"
BEARER_PREFIX = "Bearer "


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    for key, candidate in headers.items():
        if key.lower() == name:
            return candidate
    return None


class AccessGuard:
    """Authorize indexing requests."""

    def __init__(
        self,
        session: AsyncSession,
        identity_provider: IdentityProvider,
        internal_secret: str | None,
    ) -> None:
        """
        Initialize guard.

        Args:
            session: Async database session (profile lookup)
            identity_provider: Bearer token verifier
            internal_secret: Operator secret; empty or None disables that path
        """
        self.session = session
        self.identity_provider = identity_provider
        self._internal_secret = internal_secret or ""

    def _has_operator_secret(self, headers: Mapping[str, str]) -> bool:
        provided = _header(headers, INTERNAL_SECRET_HEADER)
        if not provided or not self._internal_secret:
            return False
        return hmac.compare_digest(provided.encode("utf-8"), self._internal_secret.encode("utf-8"))

    async def authorize(self, headers: Mapping[str, str]) -> AuthContext:
        """
        Authorize a request by operator secret or bearer token.

        Args:
            headers: Request headers

        Returns:
            AuthContext: System context for the operator secret, otherwise
            the verified user with their organization as tenant hint

        Raises:
            AuthorizationError: No acceptable credential
        """
        if self._has_operator_secret(headers):
            logger.info("%s:authorize - Operator secret accepted", __name__)
            return AuthContext.system()

        authorization = _header(headers, AUTHORIZATION_HEADER)
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            raise AuthorizationError("Missing bearer token")

        identity = self.identity_provider.verify(authorization[len(BEARER_PREFIX):].strip())

        profile = await user_profile_crud.get_by_id(self.session, identity.user_id)
        if profile is None:
            raise AuthorizationError(
                "Unknown user",
                details={"user_id": str(identity.user_id)},
            )

        logger.info(
            "%s:authorize - User %s authorized",
            __name__,
            identity.user_id,
            extra={"organization_id": str(profile.organization_id) if profile.organization_id else None},
        )
        return AuthContext(
            authorized=True,
            caller_id=identity.user_id,
            tenant_id_hint=profile.organization_id,
        )

    def authorize_operator(self, headers: Mapping[str, str]) -> AuthContext:
        """
        Authorize an operator-only request (operator secret required).

        Raises:
            AuthorizationError: Secret missing or wrong
        """
        if not self._has_operator_secret(headers):
            raise AuthorizationError("Operator secret required")
        return AuthContext.system()
