# =============================================================================
# app/routers/public.py - Public Catalog Endpoints
# =============================================================================
# Anonymous access through a catalog's shareable link.
# No authentication: the slug is the only credential.
# =============================================================================

from fastapi import APIRouter, Path

from core.models.response import CustomerResponseCreate
from core.services.catalog_service import CatalogService
from core.services.response_service import ResponseService

router = APIRouter()


@router.get("/catalogs/{shareable_link}")
async def get_public_catalog(
    shareable_link: str = Path(..., min_length=1, description="Catalog share slug"),
):
    """
    View a shared catalog.

    Only active, non-archived products are shown.

    Raises:
        404: CATALOG_NOT_FOUND if the link is unknown or archived
    """
    return CatalogService.get_public_catalog(shareable_link)


@router.post("/catalogs/{shareable_link}/responses", status_code=201)
async def submit_response(
    request: CustomerResponseCreate,
    shareable_link: str = Path(..., min_length=1, description="Catalog share slug"),
):
    """Leave a name, optional email and a set of liked products."""
    row = ResponseService.submit_response(shareable_link, request.model_dump())
    return {"response_id": row["id"], "liked_products": row["liked_products"], "message": "Thank you for your feedback"}
