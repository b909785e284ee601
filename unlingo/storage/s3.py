"""S3-compatible blob storage (AWS S3, Cloudflare R2) via boto3."""

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from unlingo import config as settings
from unlingo.logging import get_logger
from unlingo.storage.base import BlobStorage, BlobStorageError

logger = get_logger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass
class S3Config:
    bucket_name: str
    endpoint_url: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    region: str = "auto"
    presigned_url_expiry: int = 3600

    @classmethod
    def from_env(cls) -> "S3Config":
        """Load settings from unlingo.config."""
        return cls(
            bucket_name=settings.S3_BUCKET,
            endpoint_url=settings.S3_ENDPOINT_URL,
            access_key_id=settings.S3_ACCESS_KEY_ID,
            secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            region=settings.S3_REGION,
            presigned_url_expiry=settings.S3_PRESIGNED_URL_TTL,
        )


def _is_missing(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _MISSING_CODES


class S3BlobStorage(BlobStorage):
    """Blob storage on an S3 bucket. Object keys are the blob identifiers."""

    def __init__(self, config: S3Config, client=None):
        self.config = config
        self._client = client or boto3.client(
            "s3",
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
            ),
            region_name=config.region,
        )

    def store(self, content: bytes, content_type: str = "application/octet-stream") -> str:
        blob_id = uuid4().hex
        try:
            self._client.put_object(
                Bucket=self.config.bucket_name,
                Key=blob_id,
                Body=content,
                ContentType=content_type,
            )
        except ClientError as e:
            logger.error("blob_store_failed", blob_id=blob_id, error=str(e))
            raise BlobStorageError(f"Failed to store blob: {e}") from e
        return blob_id

    def get_url(self, blob_id: str) -> Optional[str]:
        try:
            self._client.head_object(Bucket=self.config.bucket_name, Key=blob_id)
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.config.bucket_name, "Key": blob_id},
                ExpiresIn=self.config.presigned_url_expiry,
            )
        except ClientError as e:
            if _is_missing(e):
                return None
            raise BlobStorageError(f"Failed to resolve blob {blob_id}: {e}") from e

    def get(self, blob_id: str) -> Optional[bytes]:
        try:
            response = self._client.get_object(
                Bucket=self.config.bucket_name, Key=blob_id
            )
        except ClientError as e:
            if _is_missing(e):
                return None
            raise BlobStorageError(f"Failed to read blob {blob_id}: {e}") from e
        return response["Body"].read()

    def delete(self, blob_id: str) -> None:
        try:
            self._client.delete_object(Bucket=self.config.bucket_name, Key=blob_id)
        except ClientError as e:
            if _is_missing(e):
                return
            raise BlobStorageError(f"Failed to delete blob {blob_id}: {e}") from e
