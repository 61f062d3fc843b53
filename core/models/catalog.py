# =============================================================================
# core/models/catalog.py - Catalog Schemas
# =============================================================================
# A catalog is a named, branded subset of a user's products, reachable
# publicly through its shareable link slug.
# =============================================================================

from uuid import UUID

from pydantic import BaseModel, Field


class CatalogCreate(BaseModel):
    """
    Schema for creating a catalog.

    Example:
        {
            "name": "Summer 2025",
            "brand_name": "Acme",
            "logo_url": null,
            "product_ids": ["550e8400-e29b-41d4-a716-446655440000"]
        }
    """

    name: str = Field(..., min_length=1, max_length=255, description="Catalog name")
    brand_name: str = Field(..., min_length=1, max_length=255, description="Brand shown on the public page")
    logo_url: str | None = Field(default=None, description="Brand logo URL")
    product_ids: list[UUID] = Field(default_factory=list, description="Products to include")


class CatalogUpdate(BaseModel):
    """
    Schema for updating a catalog.

    When product_ids is given it replaces the catalog's product list.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    brand_name: str | None = Field(default=None, min_length=1, max_length=255)
    logo_url: str | None = None
    product_ids: list[UUID] | None = None
