# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - products.py: Product library CRUD
# - unprocessed.py: Pending uploads and processing into products
# - catalogs.py: Catalog CRUD, share links and owner-side responses
# - public.py: Anonymous catalog view and feedback form
# - account.py: Company profile, responses, subscription and promo links
# - storage.py: /api/upload-image and /api/move-image
# - billing.py: /api/create-checkout-session and /api/cancel-subscription
# - webhooks.py: /api/stripe-webhook
# - admin.py: /api/admin-analytics, /api/admin-users, /api/admin-wipe
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import products
from . import unprocessed
from . import catalogs
from . import public
from . import account
from . import storage
from . import billing
from . import webhooks
from . import admin

__all__ = [
    "health",
    "products",
    "unprocessed",
    "catalogs",
    "public",
    "account",
    "storage",
    "billing",
    "webhooks",
    "admin",
]
