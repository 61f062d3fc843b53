# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class CatalogAppException(Exception):
    """
    Base exception for the catalog API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "CATALOG_APP_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Product Exceptions
# =============================================================================

class ProductNotFoundError(CatalogAppException):
    """Raised when a product ID doesn't exist or isn't owned by the caller."""

    def __init__(self, product_id: str):
        super().__init__(
            message=f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the product_id is correct",
            details={"product_id": product_id}
        )


class UnprocessedProductNotFoundError(CatalogAppException):
    """Raised when an unprocessed upload doesn't exist."""

    def __init__(self, unprocessed_id: str):
        super().__init__(
            message=f"Unprocessed product not found: {unprocessed_id}",
            code="UNPROCESSED_PRODUCT_NOT_FOUND",
            status_code=404,
            suggestion="It may already have been processed; refresh your products library",
            details={"unprocessed_id": unprocessed_id}
        )


class IncompleteProductError(CatalogAppException):
    """Raised when an unprocessed product is missing required metadata."""

    def __init__(self, unprocessed_id: str, missing: list[str]):
        super().__init__(
            message=f"Product details incomplete: missing {', '.join(missing)}",
            code="INCOMPLETE_PRODUCT",
            status_code=400,
            suggestion="Fill in name, code, category and supplier before processing",
            details={"unprocessed_id": unprocessed_id, "missing_fields": missing}
        )


class ProductInUseError(CatalogAppException):
    """Raised when deleting a product that catalogs still reference."""

    def __init__(self, product_id: str, catalogs: list[dict[str, Any]]):
        names = [c.get("name") for c in catalogs]
        super().__init__(
            message=f"Product is used in {len(catalogs)} catalog(s): {', '.join(str(n) for n in names)}",
            code="PRODUCT_IN_USE",
            status_code=409,
            suggestion="Make the product inactive instead, or delete with detach=true to remove it from all catalogs",
            details={"product_id": product_id, "catalogs": catalogs}
        )


# =============================================================================
# Catalog Exceptions
# =============================================================================

class CatalogNotFoundError(CatalogAppException):
    """Raised when a catalog ID or shareable link doesn't resolve."""

    def __init__(self, identifier: str):
        super().__init__(
            message=f"Catalog not found: {identifier}",
            code="CATALOG_NOT_FOUND",
            status_code=404,
            suggestion="Check the catalog link; it may have been deleted or archived",
            details={"catalog": identifier}
        )


class InvalidCatalogProductsError(CatalogAppException):
    """Raised when a catalog references products the caller can't use."""

    def __init__(self, product_ids: list[str]):
        super().__init__(
            message=f"{len(product_ids)} product(s) cannot be added to this catalog",
            code="INVALID_CATALOG_PRODUCTS",
            status_code=400,
            suggestion="Only your own, non-archived products can be added to a catalog",
            details={"product_ids": product_ids}
        )


# =============================================================================
# Plan Exceptions
# =============================================================================

class PlanLimitExceededError(CatalogAppException):
    """Raised when an operation would take usage past the plan limit."""

    def __init__(self, resource: str, current: int, limit: int, plan_id: str):
        super().__init__(
            message=f"Plan limit reached: {current}/{limit} {resource} on the {plan_id} plan",
            code="PLAN_LIMIT_EXCEEDED",
            status_code=403,
            suggestion="Upgrade your plan or remove existing items to free up space",
            details={"resource": resource, "current": current, "limit": limit, "plan_id": plan_id}
        )


# =============================================================================
# Upload / Storage Exceptions
# =============================================================================

class InvalidFileTypeError(CatalogAppException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, content_type: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {content_type or 'unknown'}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion="Only JPEG, PNG, and WebP images are allowed",
            details={"content_type": content_type, "allowed_types": allowed}
        )


class FileTooLargeError(CatalogAppException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_kb: float, max_kb: int):
        super().__init__(
            message=f"File size must be less than {max_kb}KB. Current size: {size_kb:.1f}KB",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Compress or resize the image below {max_kb}KB",
            details={"size_kb": round(size_kb, 1), "max_kb": max_kb}
        )


class MissingFileError(CatalogAppException):
    """Raised when a multipart upload carries no file."""

    def __init__(self):
        super().__init__(
            message="Missing file",
            code="MISSING_FILE",
            status_code=400,
            suggestion="Send the image in the 'file' field of a multipart/form-data body",
        )


class InvalidStorageKeyError(CatalogAppException):
    """Raised when a storage key is empty or outside the caller's namespace."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            message=f"Invalid storage key: {reason}",
            code="INVALID_STORAGE_KEY",
            status_code=400,
            suggestion="Use keys returned by /api/upload-image for your own account",
            details={"key": key}
        )


class StorageObjectNotFoundError(CatalogAppException):
    """Raised when a storage object doesn't exist."""

    def __init__(self, key: str):
        super().__init__(
            message="Source not found",
            code="STORAGE_OBJECT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the key is correct and the object wasn't already moved",
            details={"key": key}
        )


class StorageNotConfiguredError(CatalogAppException):
    """Raised when object storage settings are missing."""

    def __init__(self, setting: str):
        super().__init__(
            message=f"{setting} is not configured",
            code="STORAGE_NOT_CONFIGURED",
            status_code=500,
            suggestion=f"Set {setting} in the environment",
            details={"setting": setting}
        )


class StorageError(CatalogAppException):
    """Raised when an object storage operation fails."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            message=f"Storage {operation} failed: {error}",
            code="STORAGE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"operation": operation, "error": error}
        )


# =============================================================================
# Billing Exceptions
# =============================================================================

class InvalidPlanError(CatalogAppException):
    """Raised when checkout is requested for an unknown or free plan."""

    def __init__(self, plan_id: str):
        super().__init__(
            message="Invalid plan",
            code="INVALID_PLAN",
            status_code=400,
            suggestion="Choose one of the paid plans listed by /api/v1/subscription/plans",
            details={"plan_id": plan_id}
        )


class InvalidCouponError(CatalogAppException):
    """Raised when a checkout coupon doesn't exist or has expired."""

    def __init__(self, coupon_code: str, reason: str):
        super().__init__(
            message=reason,
            code="INVALID_COUPON",
            status_code=400,
            suggestion="Check the coupon code or continue without one",
            details={"coupon_code": coupon_code}
        )


class NoActiveSubscriptionError(CatalogAppException):
    """Raised when cancelling a subscription the caller doesn't have."""

    def __init__(self, subscription_id: str | None = None):
        super().__init__(
            message="No active subscription to cancel",
            code="NO_ACTIVE_SUBSCRIPTION",
            status_code=404,
            suggestion="Refresh the billing page; the subscription may already be canceled",
            details={"subscription_id": subscription_id} if subscription_id else None
        )


class BillingError(CatalogAppException):
    """Raised when a Stripe API call fails."""

    def __init__(self, error: str, status_code: int = 400):
        super().__init__(
            message=f"Stripe API error: {error}",
            code="BILLING_ERROR",
            status_code=status_code,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


class WebhookSignatureError(CatalogAppException):
    """Raised when a webhook payload fails signature verification."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Webhook Error: {error}",
            code="WEBHOOK_SIGNATURE_INVALID",
            status_code=400,
            suggestion="Check STRIPE_WEBHOOK_SECRET matches the endpoint's signing secret",
        )


# =============================================================================
# Admin Exceptions
# =============================================================================

class AdminAuthError(CatalogAppException):
    """Raised when an admin token is missing or wrong."""

    def __init__(self):
        super().__init__(
            message="Unauthorized",
            code="ADMIN_UNAUTHORIZED",
            status_code=401,
        )


class ConfirmationRequiredError(CatalogAppException):
    """Raised when a destructive admin call is made without confirm=true."""

    def __init__(self):
        super().__init__(
            message="Confirmation required",
            code="CONFIRMATION_REQUIRED",
            status_code=400,
            suggestion="Send {\"confirm\": true} to proceed",
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def catalog_app_exception_handler(
    request: Request,
    exc: CatalogAppException
) -> JSONResponse:
    """
    Convert CatalogAppException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    errors = exc.errors() if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": errors if isinstance(errors, str) else [
                {"loc": list(e.get("loc", [])), "msg": e.get("msg")} for e in errors
            ],
        }
    )
