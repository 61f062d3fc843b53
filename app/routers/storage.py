# =============================================================================
# app/routers/storage.py - Image Upload Endpoints
# =============================================================================
# Stores images in the R2 bucket under the caller's namespace:
#   POST /api/upload-image  (multipart: file, prefix, filename?)
#   POST /api/move-image    (JSON: fromKey, toKey)
# =============================================================================

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.auth import get_current_user, AuthUser
from core.models.billing import MoveImageRequest
from core.services.storage_service import StorageService, DEFAULT_PREFIX

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload-image")
async def upload_image(
    user: AuthUser = Depends(get_current_user),
    file: UploadFile | None = File(default=None, description="Image file"),
    prefix: str = Form(default=DEFAULT_PREFIX, description="Folder, e.g. unprocessed, products, logos"),
    filename: str | None = Form(default=None, description="Object name, default upload_<millis>"),
):
    """
    Upload an image.

    Returns:
        {"url": public URL, "key": storage key}

    Raises:
        400: MISSING_FILE or INVALID_FILE_TYPE
        413: FILE_TOO_LARGE over MAX_UPLOAD_SIZE_KB
        500: STORAGE_NOT_CONFIGURED or STORAGE_ERROR
    """
    content = await file.read() if file is not None else None
    content_type = file.content_type if file is not None else None

    return StorageService.upload_image(
        user.id,
        content,
        content_type,
        prefix=prefix,
        filename=filename,
    )


@router.post("/move-image")
async def move_image(
    request: MoveImageRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Move an image between two keys in the caller's namespace.

    Raises:
        400: INVALID_STORAGE_KEY if a key is outside the caller's folder
        404: STORAGE_OBJECT_NOT_FOUND if the source is missing
    """
    return StorageService.move_image(user.id, request.from_key, request.to_key)
