# =============================================================================
# app/routers/unprocessed.py - Unprocessed Product Endpoints
# =============================================================================
# Uploads waiting for metadata. Processing one turns it into a product
# and counts against the plan's image limit.
# =============================================================================

from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import get_current_user, AuthUser
from core.models.unprocessed import (
    BulkProcessRequest,
    ProcessRequest,
    UnprocessedProductCreate,
    UnprocessedProductUpdate,
)
from core.services.unprocessed_service import UnprocessedProductService

router = APIRouter()


@router.get("")
async def list_unprocessed(user: AuthUser = Depends(get_current_user)):
    """List the caller's pending uploads, newest first."""
    items = UnprocessedProductService.list_unprocessed(user.id)
    return {"unprocessed_products": items, "count": len(items)}


@router.post("", status_code=201)
async def create_unprocessed(
    request: UnprocessedProductCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Register an uploaded image as an unprocessed product."""
    return UnprocessedProductService.create_unprocessed(user.id, request.model_dump())


@router.post("/process")
async def process_many(
    request: BulkProcessRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Process several uploads with their stored metadata.

    Items are processed in order; failures don't stop the batch, but
    everything after a plan-limit failure is skipped.
    """
    return UnprocessedProductService.process_many(user.id, request.ids)


@router.patch("/{unprocessed_id}")
async def update_unprocessed(
    request: UnprocessedProductUpdate,
    unprocessed_id: UUID = Path(..., description="Unprocessed product UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """Save metadata on a pending upload."""
    return UnprocessedProductService.update_unprocessed(
        unprocessed_id, user.id, request.model_dump(exclude_unset=True)
    )


@router.post("/{unprocessed_id}/process", status_code=201)
async def process_unprocessed(
    unprocessed_id: UUID = Path(..., description="Unprocessed product UUID"),
    request: ProcessRequest | None = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Turn a pending upload into a product.

    Raises:
        400: INCOMPLETE_PRODUCT when name, code, category or supplier is missing
        403: PLAN_LIMIT_EXCEEDED when the plan's image limit is reached
    """
    overrides = request.model_dump(exclude_unset=True) if request else None
    return UnprocessedProductService.process(unprocessed_id, user.id, overrides)


@router.delete("/{unprocessed_id}")
async def delete_unprocessed(
    unprocessed_id: UUID = Path(..., description="Unprocessed product UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """Discard a pending upload and its image."""
    UnprocessedProductService.delete_unprocessed(unprocessed_id, user.id)
    return {"unprocessed_id": str(unprocessed_id), "message": "Unprocessed product deleted"}
