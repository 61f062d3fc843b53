# =============================================================================
# core/services/storage_service.py - Image Storage Operations
# =============================================================================
# Handles image upload/move/delete against the R2 bucket.
# Every object a user writes lives under "<user_id>/", so one user can never
# overwrite or move another user's images.
# =============================================================================

import logging
import time
from typing import Any
from uuid import UUID

from lib.r2_client import R2Client, StorageClientError
from lib.utils import normalize_uuid, sanitize_filename, sanitize_prefix
from app.config import settings
from app.exceptions import (
    FileTooLargeError,
    InvalidFileTypeError,
    InvalidStorageKeyError,
    MissingFileError,
    StorageError,
    StorageNotConfiguredError,
    StorageObjectNotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "uploads"
UNPROCESSED_PREFIX = "unprocessed"
PRODUCTS_PREFIX = "products"


def _raise_storage_error(operation: str, error: StorageClientError) -> None:
    """Translate a client-level storage error into an API error."""
    if error.code == "STORAGE_NOT_CONFIGURED":
        raise StorageNotConfiguredError("R2 credentials")
    if error.code == "PUBLIC_URL_NOT_CONFIGURED":
        raise StorageNotConfiguredError("R2_PUBLIC_BASE_URL")
    raise StorageError(operation, error.message)


class StorageService:
    """
    Service for image storage operations.

    Wraps R2Client with validation, per-user key namespacing and
    API-level errors.
    """

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    @staticmethod
    def build_key(user_id: UUID | str, prefix: str | None, filename: str | None) -> str:
        """
        Build a storage key inside the user's namespace.

        Example:
            build_key(uid, "products", "shoe.png") -> "<uid>/products/shoe.png"
        """
        safe_prefix = sanitize_prefix(prefix) or DEFAULT_PREFIX
        safe_name = sanitize_filename(filename, default=f"upload_{int(time.time() * 1000)}")
        return f"{normalize_uuid(user_id)}/{safe_prefix}/{safe_name}"

    @staticmethod
    def ensure_owned_key(user_id: UUID | str, key: str) -> str:
        """
        Check a client-supplied key is a clean key inside the user's namespace.

        Raises:
            InvalidStorageKeyError: If the key is malformed or belongs to someone else
        """
        owner = f"{normalize_uuid(user_id)}/"
        if not key or not key.startswith(owner):
            raise InvalidStorageKeyError(key, "key is outside your storage area")

        rest = key[len(owner):]
        if not rest or sanitize_prefix(rest) != rest:
            raise InvalidStorageKeyError(key, "key contains invalid path segments")
        return key

    @staticmethod
    def ensure_owned_url(user_id: UUID | str, image_url: str | None) -> str | None:
        """
        Check a client-supplied image URL doesn't point into someone else's folder.

        URLs outside our bucket are accepted as they are.

        Raises:
            InvalidStorageKeyError: If the URL is a bucket object the user doesn't own
        """
        key = R2Client.key_from_url(image_url)
        if key:
            StorageService.ensure_owned_key(user_id, key)
        return image_url

    # -------------------------------------------------------------------------
    # Upload / Move
    # -------------------------------------------------------------------------

    @staticmethod
    def validate_image(content: bytes | None, content_type: str | None) -> None:
        """
        Validate an uploaded image's presence, type and size.

        Raises:
            MissingFileError: If no file content was sent
            InvalidFileTypeError: If the MIME type isn't an allowed image type
            FileTooLargeError: If the file exceeds MAX_UPLOAD_SIZE_KB
        """
        if content is None:
            raise MissingFileError()

        allowed = settings.allowed_image_types_list
        if (content_type or "").lower() not in allowed:
            raise InvalidFileTypeError(content_type or "", allowed)

        if len(content) > settings.max_upload_size_bytes:
            raise FileTooLargeError(len(content) / 1024, settings.MAX_UPLOAD_SIZE_KB)

    @staticmethod
    def upload_image(
        user_id: UUID | str,
        content: bytes | None,
        content_type: str | None,
        prefix: str | None = None,
        filename: str | None = None,
    ) -> dict[str, str]:
        """
        Validate and store an image.

        Args:
            user_id: Owner of the image
            content: File bytes
            content_type: MIME type reported by the client
            prefix: Folder under the user's namespace (default "uploads")
            filename: Object name (default "upload_<millis>")

        Returns:
            {"url": public URL, "key": storage key}

        Raises:
            MissingFileError, InvalidFileTypeError, FileTooLargeError: On bad input
            StorageNotConfiguredError: If R2 isn't configured
            StorageError: If the upload fails
        """
        StorageService.validate_image(content, content_type)
        key = StorageService.build_key(user_id, prefix, filename)

        try:
            url = R2Client.public_url(key)
            R2Client.put_object(key, content, content_type)
        except StorageClientError as e:
            logger.error(f"Image upload failed for {key}: {e}")
            _raise_storage_error("upload", e)

        logger.info(f"Uploaded image {key} ({len(content)} bytes)")
        return {"url": url, "key": key}

    @staticmethod
    def move_image(user_id: UUID | str, from_key: str, to_key: str) -> dict[str, str]:
        """
        Move an image within the user's namespace.

        Returns:
            {"url": public URL, "key": to_key}

        Raises:
            InvalidStorageKeyError: If either key is outside the user's namespace
            StorageObjectNotFoundError: If the source doesn't exist
            StorageError: If the copy or delete fails
        """
        StorageService.ensure_owned_key(user_id, from_key)
        StorageService.ensure_owned_key(user_id, to_key)

        try:
            url = R2Client.public_url(to_key)
            moved = R2Client.move_object(from_key, to_key)
        except StorageClientError as e:
            logger.error(f"Image move failed {from_key} -> {to_key}: {e}")
            _raise_storage_error("move", e)

        if not moved:
            raise StorageObjectNotFoundError(from_key)

        return {"url": url, "key": to_key}

    @staticmethod
    def promote_unprocessed_image(user_id: UUID | str, image_url: str) -> str:
        """
        Move an image from the user's unprocessed folder to products.

        Images outside our bucket, or not under "<user>/unprocessed/",
        are left where they are.

        Returns:
            The image's URL after the move
        """
        key = R2Client.key_from_url(image_url)
        source_prefix = f"{normalize_uuid(user_id)}/{UNPROCESSED_PREFIX}/"
        if not key or not key.startswith(source_prefix):
            return image_url

        to_key = f"{normalize_uuid(user_id)}/{PRODUCTS_PREFIX}/{key[len(source_prefix):]}"
        try:
            return StorageService.move_image(user_id, key, to_key)["url"]
        except StorageObjectNotFoundError:
            logger.warning(f"Unprocessed image {key} is gone; keeping original URL")
            return image_url

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    @staticmethod
    def delete_image_url(user_id: UUID | str, image_url: str | None) -> bool:
        """
        Delete the object behind a public URL, best-effort.

        Only objects inside the user's namespace are deleted. Failures are
        logged, never raised, so that removing the database row isn't
        blocked by storage.

        Returns:
            True if an object was deleted
        """
        key = R2Client.key_from_url(image_url)
        if not key:
            return False

        try:
            StorageService.ensure_owned_key(user_id, key)
        except InvalidStorageKeyError:
            logger.warning(f"Not deleting image {key}: outside storage area of user {user_id}")
            return False

        try:
            R2Client.delete_object(key)
            return True
        except StorageClientError as e:
            logger.warning(f"Could not delete image {key}: {e}")
            return False

    @staticmethod
    def wipe_bucket() -> dict[str, Any]:
        """
        Delete every object in the bucket.

        Raises:
            StorageNotConfiguredError: If R2 isn't configured
            StorageError: If listing or deleting fails
        """
        try:
            deleted = R2Client.delete_all()
        except StorageClientError as e:
            logger.error(f"Bucket wipe failed: {e}")
            _raise_storage_error("wipe", e)

        return {"deleted": deleted}
