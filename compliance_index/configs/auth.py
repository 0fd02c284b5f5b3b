"""
Authentication configuration.

Holds the operator shared secret used by backfill jobs and the
identity-provider settings used to verify bearer tokens.

Dependencies: pydantic, pydantic_settings
System role: Credential configuration for the access guard
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Operator secret and JWT verification settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    internal_secret: str = Field(
        default="",
        validation_alias=AliasChoices("EMBEDDING_INTERNAL_SECRET", "AUTH_INTERNAL_SECRET"),
        description="Shared secret accepted in X-Internal-Secret; empty disables the path",
    )
    jwt_secret: str = Field(
        default="",
        validation_alias=AliasChoices("AUTH_JWT_SECRET", "SUPABASE_JWT_SECRET"),
        description="Identity provider signing secret for bearer tokens",
    )
    jwt_algorithms: list[str] = Field(
        default=["HS256"],
        description="Accepted JWT signing algorithms",
    )
    jwt_audience: str | None = Field(
        default="authenticated",
        description="Expected 'aud' claim; None disables the audience check",
    )
