"""
Bearer token verification against the identity provider.

The identity provider signs access tokens with a shared project secret;
verification checks signature, expiry and audience and yields the user id
from the `sub` claim.

Dependencies: python-jose
System role: Identity resolution for interactive requests
"""

import logging
import uuid

from jose import JWTError, jwt
from pydantic import BaseModel

from compliance_index.core.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


class TokenIdentity(BaseModel):
    """Verified identity carried by a bearer token."""

    user_id: uuid.UUID
    email: str | None = None
    role: str | None = None


class IdentityProvider:
    """Verify identity-provider access tokens."""

    def __init__(
        self,
        jwt_secret: str,
        algorithms: list[str] | None = None,
        audience: str | None = None,
    ) -> None:
        """
        Initialize verifier.

        Args:
            jwt_secret: Signing secret shared with the identity provider
            algorithms: Accepted algorithms (default HS256)
            audience: Expected 'aud' claim, None to skip the check
        """
        self._secret = jwt_secret
        self._algorithms = algorithms or ["HS256"]
        self._audience = audience

    def verify(self, token: str) -> TokenIdentity:
        """
        Verify a bearer token and return the caller identity.

        Args:
            token: Raw JWT (without the "Bearer " prefix)

        Returns:
            TokenIdentity: Verified user identity

        Raises:
            AuthorizationError: Token missing, malformed, expired or unsigned
        """
        if not token or not self._secret:
            raise AuthorizationError("Bearer token verification unavailable")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=self._algorithms,
                audience=self._audience,
                options={"verify_aud": self._audience is not None},
            )
        except JWTError as e:
            logger.info("%s:verify - Token rejected: %s", __name__, type(e).__name__)
            raise AuthorizationError(f"Invalid token: {e}") from e

        try:
            user_id = uuid.UUID(str(claims.get("sub", "")))
        except ValueError as e:
            raise AuthorizationError("Token subject is not a user id") from e

        return TokenIdentity(
            user_id=user_id,
            email=claims.get("email"),
            role=claims.get("role"),
        )
