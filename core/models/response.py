# =============================================================================
# core/models/response.py - Customer Response Schemas
# =============================================================================
# Feedback left by a viewer on a public catalog. Append-only: the same
# customer may submit several times.
# =============================================================================

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class CustomerResponseCreate(BaseModel):
    """
    Schema for submitting feedback on a public catalog.

    Example:
        {
            "customer_name": "Jane Doe",
            "customer_email": "jane@example.com",
            "liked_products": ["550e8400-e29b-41d4-a716-446655440000"]
        }
    """

    customer_name: str = Field(..., min_length=1, max_length=255, description="Viewer name")
    customer_email: str | None = Field(
        default=None,
        max_length=255,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        description="Optional contact email"
    )
    liked_products: list[UUID] = Field(default_factory=list, description="Liked product IDs")
    response_data: dict[str, Any] = Field(default_factory=dict, description="Free-form extra data")
