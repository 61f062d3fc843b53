# =============================================================================
# core/models/product.py - Product Schemas
# =============================================================================
# These models define the API contract for product operations:
# - ProductCreate: Input for creating a processed product
# - ProductUpdate: Partial update of product metadata
# - ProductStatusUpdate: Activate / deactivate a product
#
# A product is an uploaded image with complete metadata. Only products
# (never unprocessed uploads) count against the plan's image limit.
# =============================================================================

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    """
    Schema for creating a product.

    Example:
        {
            "name": "Linen Shirt",
            "code": "LS-001",
            "category": "Shirts",
            "supplier": "Acme Textiles",
            "image_url": "https://images.cuzata.app/<user>/products/ls-001.png"
        }
    """

    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    code: str = Field(..., min_length=1, max_length=100, description="Product code / SKU")
    category: str = Field(..., min_length=1, max_length=100, description="Product category")
    supplier: str = Field(..., min_length=1, max_length=255, description="Supplier name")
    image_url: str = Field(..., min_length=1, description="Public URL of the product image")

    # Defaults to image_url when omitted
    original_image_url: str | None = Field(
        default=None,
        description="URL of the original, unresized upload"
    )

    isactive: bool = Field(
        default=True,
        description="Inactive products are hidden from public catalogs"
    )


class ProductUpdate(BaseModel):
    """Schema for updating product metadata. Only provided fields change."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    code: str | None = Field(default=None, min_length=1, max_length=100)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    supplier: str | None = Field(default=None, min_length=1, max_length=255)
    image_url: str | None = Field(default=None, min_length=1)
    isactive: bool | None = None


class ProductStatusUpdate(BaseModel):
    """Schema for activating or deactivating a product."""

    isactive: bool = Field(..., description="New active state")

