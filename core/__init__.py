# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the catalog builder's business logic:
# - models/: Pydantic schemas for request validation
# - services/: Products, catalogs, feedback, plans, billing, storage, admin
# - plans.py: Static plan table and entitlement rules
# - promos.py: Promo codes and landing links
#
# Code in this package should NOT import from FastAPI routers or Celery.
# This keeps the logic testable and reusable.
# =============================================================================
