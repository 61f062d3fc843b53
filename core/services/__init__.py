# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .subscription_service import SubscriptionService
from .storage_service import StorageService
from .product_service import ProductService
from .unprocessed_service import UnprocessedProductService
from .catalog_service import CatalogService
from .response_service import ResponseService
from .profile_service import ProfileService
from .archive_service import ArchiveService
from .billing_service import BillingService
from .webhook_service import StripeWebhookHandler
from .admin_service import AdminService

__all__ = [
    "SubscriptionService",
    "StorageService",
    "ProductService",
    "UnprocessedProductService",
    "CatalogService",
    "ResponseService",
    "ProfileService",
    "ArchiveService",
    "BillingService",
    "StripeWebhookHandler",
    "AdminService",
]
