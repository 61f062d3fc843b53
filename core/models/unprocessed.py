# =============================================================================
# core/models/unprocessed.py - Unprocessed Product Schemas
# =============================================================================
# An unprocessed product is an uploaded image still waiting for metadata.
# It doesn't count against plan limits until it is processed into a product.
# =============================================================================

from uuid import UUID

from pydantic import BaseModel, Field

# Metadata fields that must all be non-blank before processing
REQUIRED_PRODUCT_FIELDS = ("name", "code", "category", "supplier")


class UnprocessedProductCreate(BaseModel):
    """Schema for registering a freshly uploaded image."""

    image_url: str = Field(..., min_length=1, description="Public URL of the uploaded image")
    original_image_url: str | None = Field(default=None, description="Original upload URL")
    name: str | None = Field(default=None, max_length=255)
    code: str | None = Field(default=None, max_length=100)
    category: str | None = Field(default=None, max_length=100)
    supplier: str | None = Field(default=None, max_length=255)


class UnprocessedProductUpdate(BaseModel):
    """Schema for filling in metadata on an unprocessed product."""

    name: str | None = Field(default=None, max_length=255)
    code: str | None = Field(default=None, max_length=100)
    category: str | None = Field(default=None, max_length=100)
    supplier: str | None = Field(default=None, max_length=255)


class ProcessRequest(UnprocessedProductUpdate):
    """
    Optional metadata supplied at processing time.

    Values given here override what is stored on the unprocessed row.
    """


class BulkProcessRequest(BaseModel):
    """Schema for processing several unprocessed products in one call."""

    ids: list[UUID] = Field(..., min_length=1, max_length=100, description="Unprocessed product IDs, in order")
