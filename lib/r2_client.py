# =============================================================================
# lib/r2_client.py - R2 Object Storage Client Wrapper
# =============================================================================
# Cloudflare R2 speaks the S3 API, so we talk to it with a boto3 S3 client
# pointed at the account endpoint. Singleton like SupabaseClient.
#
# Usage:
#   from lib.r2_client import R2Client
#   R2Client.put_object("user-id/products/shoe.png", data, "image/png")
#   url = R2Client.public_url("user-id/products/shoe.png")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most 1000 keys per call
DELETE_BATCH_SIZE = 1000

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


class StorageClientError(ApplicationError):
    """Error during object storage operations."""

    def __init__(
        self,
        message: str,
        code: str = "STORAGE_CLIENT_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


class R2Client:
    """
    Typed wrapper around the S3 client for the R2 bucket.

    All methods are class methods; the boto3 client is created lazily
    and shared. Tests swap it by assigning R2Client._instance.
    """

    _instance: Any = None

    @classmethod
    def get_client(cls) -> Any:
        """
        Get or create the singleton S3 client.

        Raises:
            StorageClientError: If R2 credentials are missing
        """
        if cls._instance is None:
            if not (settings.R2_ENDPOINT_URL and settings.R2_ACCESS_KEY_ID and settings.R2_SECRET_ACCESS_KEY):
                raise StorageClientError(
                    message="R2 credentials are not configured",
                    code="STORAGE_NOT_CONFIGURED",
                    suggestion="Set R2_ENDPOINT_URL, R2_ACCESS_KEY_ID and R2_SECRET_ACCESS_KEY in your .env file",
                )
            cls._instance = boto3.client(
                "s3",
                endpoint_url=settings.R2_ENDPOINT_URL,
                aws_access_key_id=settings.R2_ACCESS_KEY_ID,
                aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
                region_name="auto",
            )
            logger.info(f"R2 client initialized for bucket {settings.R2_BUCKET}")
        return cls._instance

    @staticmethod
    def _is_missing(error: ClientError) -> bool:
        return error.response.get("Error", {}).get("Code") in _MISSING_CODES

    # -------------------------------------------------------------------------
    # URLs
    # -------------------------------------------------------------------------

    @classmethod
    def public_url(cls, key: str) -> str:
        """
        Build the public URL of an object.

        Raises:
            StorageClientError: If R2_PUBLIC_BASE_URL is not set
        """
        base = settings.R2_PUBLIC_BASE_URL
        if not base:
            raise StorageClientError(
                message="R2_PUBLIC_BASE_URL is not configured",
                code="PUBLIC_URL_NOT_CONFIGURED",
                suggestion="Set R2_PUBLIC_BASE_URL to the bucket's public domain",
                details={"key": key},
            )
        return f"{base.rstrip('/')}/{key}"

    @classmethod
    def key_from_url(cls, url: str | None) -> str | None:
        """
        Recover the object key from a public URL.

        Returns None for URLs that don't point at our bucket.
        """
        base = settings.R2_PUBLIC_BASE_URL.rstrip("/")
        if not url or not base or not url.startswith(base + "/"):
            return None
        return url[len(base) + 1:].split("?", 1)[0] or None

    # -------------------------------------------------------------------------
    # Single Objects
    # -------------------------------------------------------------------------

    @classmethod
    def put_object(cls, key: str, body: bytes, content_type: str) -> None:
        """
        Store an object.

        Raises:
            StorageClientError: If the upload fails
        """
        try:
            cls.get_client().put_object(
                Bucket=settings.R2_BUCKET,
                Key=key,
                Body=body,
                ContentType=content_type or "application/octet-stream",
            )
            logger.debug(f"Stored object {key} ({len(body)} bytes)")
        except (ClientError, BotoCoreError) as e:
            raise StorageClientError(
                message=f"Failed to store object: {e}",
                code="PUT_FAILED",
                details={"key": key},
            )

    @classmethod
    def delete_object(cls, key: str) -> None:
        """
        Delete an object. Deleting a missing key is not an error.

        Raises:
            StorageClientError: If the delete fails
        """
        try:
            cls.get_client().delete_object(Bucket=settings.R2_BUCKET, Key=key)
            logger.debug(f"Deleted object {key}")
        except (ClientError, BotoCoreError) as e:
            raise StorageClientError(
                message=f"Failed to delete object: {e}",
                code="DELETE_FAILED",
                details={"key": key},
            )

    @classmethod
    def move_object(cls, from_key: str, to_key: str) -> bool:
        """
        Move an object with a server-side copy, then delete the source.

        The copy keeps the source's content type and metadata.

        Returns:
            False if the source doesn't exist, True once moved

        Raises:
            StorageClientError: If the copy or delete fails
        """
        try:
            cls.get_client().copy_object(
                Bucket=settings.R2_BUCKET,
                Key=to_key,
                CopySource={"Bucket": settings.R2_BUCKET, "Key": from_key},
            )
        except ClientError as e:
            if cls._is_missing(e):
                return False
            raise StorageClientError(
                message=f"Failed to copy object: {e}",
                code="COPY_FAILED",
                details={"from_key": from_key, "to_key": to_key},
            )
        except BotoCoreError as e:
            raise StorageClientError(
                message=f"Failed to copy object: {e}",
                code="COPY_FAILED",
                details={"from_key": from_key, "to_key": to_key},
            )

        cls.delete_object(from_key)
        logger.info(f"Moved object {from_key} -> {to_key}")
        return True

    # -------------------------------------------------------------------------
    # Bulk Operations
    # -------------------------------------------------------------------------

    @classmethod
    def iter_keys(cls, prefix: str | None = None, page_size: int = 1000) -> Iterator[list[str]]:
        """
        Yield object keys page by page using continuation tokens.

        Args:
            prefix: Only list keys under this prefix
            page_size: Keys per page (max 1000)

        Raises:
            StorageClientError: If listing fails
        """
        client = cls.get_client()
        params: dict[str, Any] = {"Bucket": settings.R2_BUCKET, "MaxKeys": page_size}
        if prefix:
            params["Prefix"] = prefix

        while True:
            try:
                response = client.list_objects_v2(**params)
            except (ClientError, BotoCoreError) as e:
                raise StorageClientError(
                    message=f"Failed to list objects: {e}",
                    code="LIST_FAILED",
                    details={"prefix": prefix},
                )

            keys = [obj["Key"] for obj in response.get("Contents", [])]
            if keys:
                yield keys

            if not response.get("IsTruncated"):
                break
            params["ContinuationToken"] = response["NextContinuationToken"]

    @classmethod
    def delete_keys(cls, keys: list[str]) -> int:
        """
        Delete many keys with batched DeleteObjects calls.

        Returns:
            Number of keys deleted

        Raises:
            StorageClientError: If a batch fails
        """
        client = cls.get_client()
        deleted = 0

        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start:start + DELETE_BATCH_SIZE]
            try:
                response = client.delete_objects(
                    Bucket=settings.R2_BUCKET,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
                )
            except (ClientError, BotoCoreError) as e:
                raise StorageClientError(
                    message=f"Failed to delete objects: {e}",
                    code="BULK_DELETE_FAILED",
                    details={"batch_size": len(batch)},
                )
            errors = response.get("Errors", [])
            for error in errors:
                logger.warning(f"Could not delete {error.get('Key')}: {error.get('Message')}")
            deleted += len(batch) - len(errors)

        return deleted

    @classmethod
    def delete_all(cls, prefix: str | None = None) -> int:
        """
        Delete every object (optionally under a prefix).

        Returns:
            Number of objects deleted
        """
        deleted = 0
        for keys in cls.iter_keys(prefix):
            deleted += cls.delete_keys(keys)
        logger.info(f"Deleted {deleted} objects from {settings.R2_BUCKET} (prefix={prefix or '*'})")
        return deleted

    @classmethod
    def check_bucket(cls) -> bool:
        """Check the bucket is reachable for the readiness check."""
        try:
            cls.get_client().head_bucket(Bucket=settings.R2_BUCKET)
            return True
        except (ClientError, BotoCoreError, StorageClientError) as e:
            logger.warning(f"R2 bucket check failed: {e}")
            return False
