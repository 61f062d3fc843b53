# =============================================================================
# app/routers/catalogs.py - Catalog Endpoints
# =============================================================================
# Owner-side catalog management, sharing links and collected feedback.
# The public view lives in app/routers/public.py.
# =============================================================================

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from core.models.catalog import CatalogCreate, CatalogUpdate
from core.services.catalog_service import CatalogService
from core.services.response_service import ResponseService

router = APIRouter()


@router.get("")
async def list_catalogs(
    user: AuthUser = Depends(get_current_user),
    include_archived: bool = Query(default=False),
):
    """List the caller's catalogs with their products."""
    catalogs = CatalogService.list_catalogs(user.id, include_archived=include_archived)
    return {"catalogs": catalogs, "count": len(catalogs)}


@router.post("", status_code=201)
async def create_catalog(
    request: CatalogCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a catalog with a new shareable link.

    Raises:
        400: INVALID_CATALOG_PRODUCTS if a product isn't the caller's
        403: PLAN_LIMIT_EXCEEDED when the plan's catalog limit is reached
    """
    return CatalogService.create_catalog(user.id, request.model_dump())


@router.get("/{catalog_id}")
async def get_catalog(
    catalog_id: UUID = Path(..., description="Catalog UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """Get one catalog with its products."""
    return CatalogService.get_catalog(catalog_id, user.id)


@router.patch("/{catalog_id}")
async def update_catalog(
    request: CatalogUpdate,
    catalog_id: UUID = Path(..., description="Catalog UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """Update catalog fields. product_ids replaces the product list."""
    return CatalogService.update_catalog(
        catalog_id, user.id, request.model_dump(exclude_unset=True)
    )


@router.delete("/{catalog_id}")
async def delete_catalog(
    catalog_id: UUID = Path(..., description="Catalog UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """Delete a catalog along with its product links and responses."""
    CatalogService.delete_catalog(catalog_id, user.id)
    return {"catalog_id": str(catalog_id), "message": "Catalog deleted successfully"}


@router.get("/{catalog_id}/share")
async def get_share_links(
    catalog_id: UUID = Path(..., description="Catalog UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """Public URL plus ready-made email, WhatsApp and SMS share links."""
    return CatalogService.get_share_links(catalog_id, user.id)


@router.get("/{catalog_id}/responses")
async def list_catalog_responses(
    catalog_id: UUID = Path(..., description="Catalog UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """List feedback left on this catalog, newest first."""
    responses = ResponseService.list_catalog_responses(catalog_id, user.id)
    return {"responses": responses, "count": len(responses)}


@router.get("/{catalog_id}/responses/summary")
async def summarize_catalog_responses(
    catalog_id: UUID = Path(..., description="Catalog UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """Like counts per product, most liked first."""
    return ResponseService.summarize(catalog_id, user.id)
