# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for request validation:
# - product.py: Product CRUD schemas
# - unprocessed.py: Uploaded images awaiting metadata
# - catalog.py: Catalog CRUD schemas
# - response.py: Public catalog feedback
# - company_profile.py: Company branding
# - billing.py: Checkout, cancel, storage and admin bodies
#
# These models define the "contract" between API and clients.
# =============================================================================

from .product import (
    ProductCreate,
    ProductStatusUpdate,
    ProductUpdate,
)

from .unprocessed import (
    REQUIRED_PRODUCT_FIELDS,
    BulkProcessRequest,
    ProcessRequest,
    UnprocessedProductCreate,
    UnprocessedProductUpdate,
)

from .catalog import (
    CatalogCreate,
    CatalogUpdate,
)

from .response import CustomerResponseCreate

from .company_profile import CompanyProfileUpdate

from .billing import (
    AdminWipeRequest,
    CancelSubscriptionRequest,
    CheckoutRequest,
    MoveImageRequest,
)

__all__ = [
    # Product
    "ProductCreate",
    "ProductStatusUpdate",
    "ProductUpdate",
    # Unprocessed
    "REQUIRED_PRODUCT_FIELDS",
    "BulkProcessRequest",
    "ProcessRequest",
    "UnprocessedProductCreate",
    "UnprocessedProductUpdate",
    # Catalog
    "CatalogCreate",
    "CatalogUpdate",
    # Feedback
    "CustomerResponseCreate",
    # Profile
    "CompanyProfileUpdate",
    # Billing / storage / admin
    "AdminWipeRequest",
    "CancelSubscriptionRequest",
    "CheckoutRequest",
    "MoveImageRequest",
]
