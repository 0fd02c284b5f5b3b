"""AWS boundary: S3-compatible document storage."""

from compliance_index.boundary.aws.s3_client import S3StorageClient

__all__ = ["S3StorageClient"]
