"""Identity provider boundary: bearer token verification."""

from compliance_index.boundary.identity.identity_provider import IdentityProvider, TokenIdentity

__all__ = ["IdentityProvider", "TokenIdentity"]
