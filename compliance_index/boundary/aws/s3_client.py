"""
S3 client for document bucket operations.

Issues short-lived signed read URLs so the PDF extraction model can fetch
a stored document directly. Does NOT download document bytes.

Dependencies: boto3, botocore
System role: Blob storage access for the indexing pipeline
"""

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from compliance_index.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class S3StorageClient:
    """S3 client for signed document URLs across storage buckets."""

    def __init__(self, region: str = "us-east-1", endpoint_url: str | None = None) -> None:
        """
        Initialize S3 client.

        Args:
            region: AWS region for the document buckets
            endpoint_url: Optional S3-compatible endpoint
        """
        self._region = region
        self._s3_client = boto3.client("s3", region_name=region, endpoint_url=endpoint_url)

    def create_signed_url(self, bucket: str, path: str, expires_in: int = 300) -> str:
        """
        Generate a presigned GET URL for a stored document.

        Args:
            bucket: Storage bucket name
            path: Object key inside the bucket
            expires_in: URL expiry in seconds

        Returns:
            str: Presigned read URL

        Raises:
            StorageError: If presigned URL generation fails
        """
        try:
            return self._s3_client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": bucket, "Key": path},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(
                "%s:create_signed_url - %s: %s",
                __name__,
                type(e).__name__,
                e,
                extra={"bucket": bucket, "path": path},
            )
            raise StorageError(
                f"Failed to get signed URL: {e}",
                details={"bucket": bucket, "path": path},
            ) from e
