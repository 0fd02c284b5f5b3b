"""
Blob storage configuration.

Settings for the document bucket client used to issue short-lived
signed read URLs.

Dependencies: pydantic_settings
System role: Storage client configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Settings for signed URL generation against the document store."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    region: str = Field(
        default="us-east-1",
        description="AWS region for the document buckets",
    )
    endpoint_url: str | None = Field(
        default=None,
        description="Custom S3-compatible endpoint (managed storage, MinIO)",
    )
    signed_url_expiry: int = Field(
        default=300,
        description="Signed read URL lifetime in seconds",
    )
