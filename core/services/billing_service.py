# =============================================================================
# core/services/billing_service.py - Stripe Billing Operations
# =============================================================================
# Checkout session creation and subscription cancellation.
# Subscription state itself is only ever written by the webhook handler.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

import stripe

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid
from core.plans import get_plan, is_paid_plan
from app.config import settings
from app.exceptions import (
    BillingError,
    InvalidCouponError,
    InvalidPlanError,
    NoActiveSubscriptionError,
)

logger = logging.getLogger(__name__)


def _configure_stripe() -> None:
    if not settings.STRIPE_SECRET_KEY:
        raise BillingError("Stripe configuration missing", status_code=500)
    stripe.api_key = settings.STRIPE_SECRET_KEY


def _billing_error(action: str, error: Exception) -> BillingError:
    """Map a Stripe SDK error to BillingError (502 when Stripe is unreachable)."""
    logger.error(f"Failed to {action}: {error}")
    if isinstance(error, stripe.APIConnectionError):
        return BillingError(str(error), status_code=502)
    return BillingError(getattr(error, "user_message", None) or str(error))


class BillingService:
    """Manages Stripe billing operations."""

    @staticmethod
    def customer_email(user_id: UUID | str) -> str:
        """Lookup email used for a user's Stripe customer."""
        return f"{normalize_uuid(user_id)}@{settings.STRIPE_CUSTOMER_EMAIL_DOMAIN}"

    @staticmethod
    def get_or_create_customer(user_id: UUID | str) -> str:
        """
        Find the user's Stripe customer, creating one if needed.

        Order: customer id stored on user_plans, then a customer with the
        lookup email, then a new customer.

        Returns:
            Stripe customer id

        Raises:
            BillingError: If Stripe calls fail
        """
        plan_row = SupabaseClient.fetch_user_plan(user_id)
        if plan_row and plan_row.get("stripe_customer_id"):
            return plan_row["stripe_customer_id"]

        email = BillingService.customer_email(user_id)
        try:
            existing = stripe.Customer.list(email=email, limit=1)
            if existing.data:
                return existing.data[0].id

            customer = stripe.Customer.create(
                email=email,
                metadata={"userId": normalize_uuid(user_id)},
            )
            logger.info(f"Created Stripe customer {customer.id} for user {user_id}")
            return customer.id

        except stripe.StripeError as e:
            raise _billing_error("create Stripe customer", e)

    @staticmethod
    def validate_coupon(coupon_code: str) -> str:
        """
        Check a coupon exists and is still valid.

        Returns:
            The normalized (trimmed, upper-cased) coupon id

        Raises:
            InvalidCouponError: If the coupon doesn't exist or has expired
            BillingError: If Stripe can't be reached
        """
        code = coupon_code.strip().upper()
        try:
            coupon = stripe.Coupon.retrieve(code)
        except stripe.InvalidRequestError:
            raise InvalidCouponError(code, "The coupon code you entered does not exist")
        except stripe.StripeError as e:
            raise _billing_error("validate coupon", e)

        if not coupon.valid:
            raise InvalidCouponError(code, "The coupon code you entered is not valid or has expired")
        return code

    @staticmethod
    def _line_item(plan_id: str) -> dict[str, Any]:
        if settings.STRIPE_STARTER_PRICE_ID and plan_id == "starter":
            return {"price": settings.STRIPE_STARTER_PRICE_ID, "quantity": 1}

        plan = get_plan(plan_id)
        return {
            "price_data": {
                "currency": plan["currency"],
                "product_data": {
                    "name": f"{plan['name']} (Monthly)",
                    "description": plan["description"],
                },
                "unit_amount": plan["price"] * 100,
                "recurring": {"interval": plan["interval"]},
            },
            "quantity": 1,
        }

    @staticmethod
    def create_checkout_session(
        user_id: UUID | str,
        plan_id: str,
        coupon_code: str | None = None,
        origin: str | None = None,
    ) -> dict[str, str]:
        """
        Create a Stripe Checkout session for a paid plan.

        The subscription carries userId/planId metadata so webhook events
        can be tied back to the user.

        Args:
            user_id: Subscribing user
            plan_id: Paid plan id
            coupon_code: Optional Stripe coupon id
            origin: Web app origin for the success/cancel redirects

        Returns:
            {"url": checkout URL, "session_id": session id}

        Raises:
            InvalidPlanError: If plan_id isn't a paid plan
            InvalidCouponError: If the coupon is unknown or expired
            BillingError: If Stripe calls fail
        """
        if not is_paid_plan(plan_id):
            raise InvalidPlanError(plan_id)

        _configure_stripe()
        user_id_str = normalize_uuid(user_id)
        customer_id = BillingService.get_or_create_customer(user_id_str)

        base_url = (origin or settings.APP_BASE_URL).rstrip("/")
        metadata = {"userId": user_id_str, "planId": plan_id, "interval": "month"}
        params: dict[str, Any] = {
            "customer": customer_id,
            "payment_method_types": ["card"],
            "line_items": [BillingService._line_item(plan_id)],
            "mode": "subscription",
            "success_url": f"{base_url}/app?success=true",
            "cancel_url": f"{base_url}/app?canceled=true",
            "metadata": metadata,
            "subscription_data": {"metadata": metadata},
        }

        if coupon_code and coupon_code.strip():
            params["discounts"] = [{"coupon": BillingService.validate_coupon(coupon_code)}]

        try:
            session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as e:
            raise _billing_error("create checkout session", e)

        logger.info(f"Created checkout session {session.id} for user {user_id_str} ({plan_id})")
        return {"url": session.url, "session_id": session.id}

    @staticmethod
    def cancel_subscription(user_id: UUID | str, subscription_id: str) -> dict[str, Any]:
        """
        Cancel the user's subscription at the end of the billing period.

        Only the subscription stored on the user's own plan can be canceled.

        Returns:
            {"id", "status", "cancel_at_period_end"}

        Raises:
            NoActiveSubscriptionError: If the id isn't the user's subscription
            BillingError: If the Stripe call fails
        """
        plan_row = SupabaseClient.fetch_user_plan(user_id)
        if not plan_row or plan_row.get("stripe_subscription_id") != subscription_id:
            raise NoActiveSubscriptionError(subscription_id)

        _configure_stripe()
        try:
            subscription = stripe.Subscription.modify(subscription_id, cancel_at_period_end=True)
        except stripe.StripeError as e:
            raise _billing_error("cancel subscription", e)

        logger.info(f"Subscription {subscription_id} for user {user_id} set to cancel at period end")
        return {
            "id": subscription.id,
            "status": subscription.status,
            "cancel_at_period_end": subscription.cancel_at_period_end,
        }
