# =============================================================================
# app/routers/products.py - Product CRUD Endpoints
# =============================================================================
# Manages the caller's product library. All endpoints require
# authentication and only ever touch the caller's own rows.
# =============================================================================

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from core.models.product import ProductCreate, ProductUpdate, ProductStatusUpdate
from core.services.product_service import ProductService

router = APIRouter()


@router.get("")
async def list_products(
    user: AuthUser = Depends(get_current_user),
    search: str | None = Query(default=None, description="Match on name or code"),
    category: str | None = Query(default=None),
    supplier: str | None = Query(default=None),
    active: bool | None = Query(default=None, description="Filter by isactive"),
    include_archived: bool = Query(default=False),
):
    """
    List the caller's products, newest first.

    Each product carries thumbnail/medium/large image URLs.
    """
    products = ProductService.list_products(
        user.id,
        search=search,
        category=category,
        supplier=supplier,
        active=active,
        include_archived=include_archived,
    )
    return {"products": products, "count": len(products)}


@router.post("", status_code=201)
async def create_product(
    request: ProductCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a product.

    Raises:
        403: PLAN_LIMIT_EXCEEDED when the plan's image limit is reached
    """
    return ProductService.create_product(user.id, request.model_dump())


@router.get("/{product_id}")
async def get_product(
    product_id: UUID = Path(..., description="Product UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """Get one product."""
    return ProductService.get_product(product_id, user.id)


@router.patch("/{product_id}")
async def update_product(
    request: ProductUpdate,
    product_id: UUID = Path(..., description="Product UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """Update the fields sent in the body."""
    return ProductService.update_product(
        product_id, user.id, request.model_dump(exclude_unset=True)
    )


@router.patch("/{product_id}/status")
async def set_product_status(
    request: ProductStatusUpdate,
    product_id: UUID = Path(..., description="Product UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """Toggle whether the product shows up on public catalogs."""
    return ProductService.set_status(product_id, user.id, request.isactive)


@router.get("/{product_id}/catalogs")
async def get_product_catalogs(
    product_id: UUID = Path(..., description="Product UUID"),
    user: AuthUser = Depends(get_current_user),
):
    """List the catalogs that include this product."""
    return {"catalogs": ProductService.get_product_catalogs(product_id, user.id)}


@router.delete("/{product_id}")
async def delete_product(
    product_id: UUID = Path(..., description="Product UUID"),
    detach: bool = Query(default=False, description="Remove from catalogs before deleting"),
    user: AuthUser = Depends(get_current_user),
):
    """
    Delete a product and its image.

    Raises:
        409: PRODUCT_IN_USE if catalogs still include it and detach is false
    """
    result = ProductService.delete_product(product_id, user.id, detach=detach)
    return {**result, "message": "Product deleted successfully"}
