# =============================================================================
# app/routers/billing.py - Stripe Checkout Endpoints
# =============================================================================
#   POST /api/create-checkout-session  (JSON: planId, couponCode?)
#   POST /api/cancel-subscription      (JSON: subscriptionId)
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Header

from app.auth import get_current_user, AuthUser
from core.models.billing import CheckoutRequest, CancelSubscriptionRequest
from core.services.billing_service import BillingService

router = APIRouter()


@router.post("/create-checkout-session")
async def create_checkout_session(
    request: CheckoutRequest,
    user: AuthUser = Depends(get_current_user),
    origin: Annotated[str | None, Header()] = None,
):
    """
    Start a Stripe Checkout for a paid plan.

    Success and cancel URLs point back at the calling site's Origin.

    Raises:
        400: INVALID_PLAN or INVALID_COUPON
        500/502: BILLING_ERROR when Stripe is unavailable or misconfigured
    """
    return BillingService.create_checkout_session(
        user.id,
        request.plan_id,
        coupon_code=request.coupon_code,
        origin=origin,
    )


@router.post("/cancel-subscription")
async def cancel_subscription(
    request: CancelSubscriptionRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Cancel the caller's subscription at the end of the billing period.

    Raises:
        404: NO_ACTIVE_SUBSCRIPTION if the id isn't the caller's subscription
    """
    return BillingService.cancel_subscription(user.id, request.subscription_id)
