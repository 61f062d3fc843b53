# =============================================================================
# core/services/webhook_service.py - Stripe Webhook Handler
# =============================================================================
# Verifies and processes Stripe events:
# - customer.subscription.created/updated/deleted: upsert user_plans,
#   append user_subscriptions, archive or restore items for the new plan
# - checkout.session.completed: logged; the subscription events carry state
#
# Each event id is recorded in stripe_events so redeliveries are skipped.
# =============================================================================

import json
import logging
from datetime import datetime, timezone
from typing import Any

import stripe

from lib.supabase_client import SupabaseClient
from core.plans import effective_plan_id, get_plan
from core.services.archive_service import ArchiveService
from app.config import settings
from app.exceptions import WebhookSignatureError

logger = logging.getLogger(__name__)

SUBSCRIPTION_EVENTS = frozenset({
    "customer.subscription.created",
    "customer.subscription.updated",
    "customer.subscription.deleted",
})


def _timestamp(value: Any) -> str | None:
    """Convert a Stripe epoch-seconds value to ISO 8601."""
    if value in (None, ""):
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc).isoformat()


def _period_bounds(subscription: dict[str, Any]) -> tuple[str | None, str | None]:
    """
    Read the billing period of a subscription.

    Newer Stripe API versions moved the bounds from the subscription onto
    its items, so fall back to the first item.
    """
    start = subscription.get("current_period_start")
    end = subscription.get("current_period_end")

    if start is None or end is None:
        items = (subscription.get("items") or {}).get("data") or []
        if items:
            start = start if start is not None else items[0].get("current_period_start")
            end = end if end is not None else items[0].get("current_period_end")

    return _timestamp(start), _timestamp(end)


class StripeWebhookHandler:
    """Handles Stripe webhook events."""

    def __init__(self, webhook_secret: str | None = None):
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.STRIPE_WEBHOOK_SECRET
        if not self.webhook_secret:
            logger.warning("STRIPE_WEBHOOK_SECRET not configured")

    def verify_webhook_signature(self, payload: bytes, sig_header: str | None) -> dict[str, Any]:
        """
        Verify the Stripe-Signature header and parse the event.

        Raises:
            WebhookSignatureError: If the header is missing or doesn't verify
        """
        if not sig_header:
            raise WebhookSignatureError("No signature")
        if not self.webhook_secret:
            raise WebhookSignatureError("Webhook secret not configured")

        try:
            stripe.Webhook.construct_event(payload, sig_header, self.webhook_secret)
        except ValueError as e:
            logger.error(f"Invalid webhook payload: {e}")
            raise WebhookSignatureError("Invalid payload")
        except stripe.SignatureVerificationError as e:
            logger.error(f"Invalid webhook signature: {e}")
            raise WebhookSignatureError(str(e))

        # Verified; work on plain dicts rather than StripeObjects
        return json.loads(payload)

    def handle_event(self, event: dict[str, Any]) -> dict[str, Any]:
        """
        Route a verified event to its handler.

        Redelivered events are acknowledged without being processed again.
        Handler errors propagate so Stripe retries the delivery.

        Returns:
            Dict describing what was done
        """
        event_id = event.get("id")
        event_type = event.get("type", "")

        if event_id and SupabaseClient.has_processed_event(event_id):
            logger.info(f"Skipping already processed Stripe event {event_id} ({event_type})")
            return {"status": "duplicate", "event_type": event_type}

        logger.info(f"Processing Stripe event: {event_type} ({event_id})")

        if event_type in SUBSCRIPTION_EVENTS:
            result = self.handle_subscription_change(event["data"]["object"])
        elif event_type == "checkout.session.completed":
            result = self.handle_checkout_completed(event["data"]["object"])
        else:
            logger.info(f"Unhandled event type: {event_type}")
            result = {"status": "ignored"}

        if event_id:
            SupabaseClient.record_event(event_id, event_type)

        return {**result, "event_type": event_type}

    def handle_subscription_change(self, subscription: dict[str, Any]) -> dict[str, Any]:
        """
        Sync a subscription into user_plans and user_subscriptions.

        If the effective plan changed, excess items are archived (downgrade)
        or archived items restored (upgrade).

        Raises:
            ValueError: If the subscription has no userId metadata
        """
        metadata = subscription.get("metadata") or {}
        user_id = metadata.get("userId")
        if not user_id:
            raise ValueError(f"No userId in metadata of subscription {subscription.get('id')}")

        plan_id = metadata.get("planId") or "starter"
        period_start, period_end = _period_bounds(subscription)

        previous = SupabaseClient.fetch_user_plan(user_id)
        previous_plan = effective_plan_id(previous)

        record = {
            "user_id": user_id,
            "plan_id": plan_id,
            "status": subscription.get("status"),
            "current_period_start": period_start,
            "current_period_end": period_end,
            "cancel_at_period_end": bool(subscription.get("cancel_at_period_end")),
            "stripe_subscription_id": subscription.get("id"),
            "stripe_customer_id": subscription.get("customer"),
        }
        SupabaseClient.upsert_user_plan(record)
        SupabaseClient.insert_subscription_history(record)

        new_plan = effective_plan_id(record)
        archival: dict[str, Any] = {}
        if new_plan != previous_plan:
            logger.info(f"Effective plan for user {user_id} changed: {previous_plan} -> {new_plan}")
            if get_plan(new_plan)["max_images"] < get_plan(previous_plan)["max_images"]:
                archival = {"archived": ArchiveService.archive_excess(user_id)}
            else:
                archival = {"restored": ArchiveService.restore_archived(user_id)}

        return {
            "status": "success",
            "user_id": user_id,
            "plan_id": new_plan,
            **archival,
        }

    def handle_checkout_completed(self, session: dict[str, Any]) -> dict[str, Any]:
        """Log a completed checkout; subscription events carry the state."""
        if session.get("mode") != "subscription":
            logger.info(f"Non-subscription checkout completed: {session.get('id')}")
        else:
            logger.info(f"Subscription checkout completed: {session.get('id')}")
        return {"status": "success"}
