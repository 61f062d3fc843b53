# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Cuzata Catalog API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    CatalogAppException,
    catalog_app_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    account,
    admin,
    billing,
    catalogs,
    health,
    products,
    public,
    storage,
    unprocessed,
    webhooks,
)
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Clients (Supabase, R2, Stripe) are created lazily on first use, so
    startup only reports configuration.
    """
    logger.info(f"Starting Cuzata Catalog API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.STRIPE_SECRET_KEY:
        logger.warning("STRIPE_SECRET_KEY not set; billing endpoints will fail")
    if not settings.R2_BUCKET or not settings.R2_ENDPOINT_URL:
        logger.warning("R2 storage not configured; image uploads will fail")

    yield

    logger.info("Shutting down Cuzata Catalog API")


# Create FastAPI application
app = FastAPI(
    title="Cuzata Catalog API",
    description="""
## Product Catalog Builder API

Upload product images, describe them, group them into branded catalogs and
share those catalogs through public links that collect customer likes.

### How It Works

1. **Upload** - `POST /api/upload-image` stores an image in your folder
2. **Describe** - register it as an unprocessed product, then process it
   once name, code, category and supplier are filled in
3. **Build a Catalog** - pick products, set a brand name and logo
4. **Share** - send the public link by email, WhatsApp or SMS
5. **Collect Feedback** - customers leave their name and liked products

### Plans

| Plan | Price | Images | Catalogs |
|------|-------|--------|----------|
| **Free** | $0 | 4 | 2 |
| **Starter** | $10/month | 6 | 4 |

Limits are enforced server-side. On downgrade, excess items are archived
and deleted after a grace period unless you upgrade again.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Verify Supabase tokens and get the current user"},
        {"name": "Products", "description": "Your processed product library"},
        {"name": "Unprocessed", "description": "Uploads waiting for metadata"},
        {"name": "Catalogs", "description": "Branded catalogs, share links and feedback"},
        {"name": "Public", "description": "Anonymous catalog view and feedback form"},
        {"name": "Account", "description": "Company profile, responses and subscription"},
        {"name": "Storage", "description": "Image upload and move"},
        {"name": "Billing", "description": "Stripe checkout and cancellation"},
        {"name": "Webhooks", "description": "Stripe event receiver"},
        {"name": "Admin", "description": "Operator analytics, users and wipe"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(CatalogAppException)
async def handle_catalog_app_exception(request: Request, exc: CatalogAppException):
    """Handle custom application exceptions."""
    return await catalog_app_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request body/query validation errors."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Product library
app.include_router(
    products.router,
    prefix="/api/v1/products",
    tags=["Products"]
)

# Unprocessed uploads
app.include_router(
    unprocessed.router,
    prefix="/api/v1/unprocessed",
    tags=["Unprocessed"]
)

# Catalogs, sharing and owner-side responses
app.include_router(
    catalogs.router,
    prefix="/api/v1/catalogs",
    tags=["Catalogs"]
)

# Anonymous catalog view
app.include_router(
    public.router,
    prefix="/api/v1/public",
    tags=["Public"]
)

# Profile, responses, subscription and promo links
app.include_router(
    account.router,
    prefix="/api/v1",
    tags=["Account"]
)

# Image storage (R2)
app.include_router(
    storage.router,
    prefix="/api",
    tags=["Storage"]
)

# Stripe checkout
app.include_router(
    billing.router,
    prefix="/api",
    tags=["Billing"]
)

# Stripe webhooks
app.include_router(
    webhooks.router,
    prefix="/api",
    tags=["Webhooks"]
)

# Admin endpoints
app.include_router(
    admin.router,
    prefix="/api",
    tags=["Admin"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Cuzata Catalog API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
