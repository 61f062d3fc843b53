# =============================================================================
# core/models/billing.py - Billing, Storage and Admin Request Schemas
# =============================================================================
# Bodies of the /api/* endpoints. Field aliases keep the camelCase names
# the web client sends (planId, couponCode, subscriptionId, fromKey, toKey).
# =============================================================================

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CheckoutRequest(BaseModel):
    """Body of POST /api/create-checkout-session."""

    model_config = ConfigDict(populate_by_name=True)

    plan_id: str = Field(..., alias="planId", min_length=1, description="Paid plan to subscribe to")
    coupon_code: str | None = Field(default=None, alias="couponCode", description="Optional Stripe coupon id")


class CancelSubscriptionRequest(BaseModel):
    """Body of POST /api/cancel-subscription."""

    model_config = ConfigDict(populate_by_name=True)

    subscription_id: str = Field(..., alias="subscriptionId", min_length=1)


class MoveImageRequest(BaseModel):
    """Body of POST /api/move-image."""

    model_config = ConfigDict(populate_by_name=True)

    from_key: str = Field(..., alias="fromKey", min_length=1)
    to_key: str = Field(..., alias="toKey", min_length=1)


class AdminWipeRequest(BaseModel):
    """Body of POST /api/admin-wipe."""

    confirm: bool = False
    scope: Literal["all", "storage", "db"] = "all"
