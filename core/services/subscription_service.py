# =============================================================================
# core/services/subscription_service.py - Plan Usage and Limit Gating
# =============================================================================
# Compares live usage counts against the static plan table.
# Mutating services call the ensure_* helpers before inserting, so limits
# hold no matter which client calls the API.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from core.plans import PLANS, calculate_usage_percentage, effective_plan_id, get_plan
from app.exceptions import PlanLimitExceededError

logger = logging.getLogger(__name__)


class SubscriptionService:
    """
    Service for plan resolution and usage limits.

    Only non-archived products and catalogs count. Unprocessed uploads
    never count against the image limit.
    """

    @staticmethod
    def get_effective_plan(user_id: UUID | str) -> dict[str, Any]:
        """Get the plan whose limits currently apply to a user."""
        plan_row = SupabaseClient.fetch_user_plan(user_id)
        return get_plan(effective_plan_id(plan_row))

    @staticmethod
    def get_usage(user_id: UUID | str) -> dict[str, Any]:
        """
        Get live usage counts for a user.

        Returns:
            Dict with image_count, catalog_count, unprocessed_count,
            max_images, max_catalogs and plan_id
        """
        plan = SubscriptionService.get_effective_plan(user_id)
        filters = {"user_id": user_id}

        return {
            "plan_id": plan["id"],
            "image_count": SupabaseClient.count_rows("products", filters, exclude_archived=True),
            "catalog_count": SupabaseClient.count_rows("catalogs", filters, exclude_archived=True),
            "unprocessed_count": SupabaseClient.count_rows("unprocessed_products", filters),
            "max_images": plan["max_images"],
            "max_catalogs": plan["max_catalogs"],
        }

    @staticmethod
    def get_summary(user_id: UUID | str) -> dict[str, Any]:
        """
        Get everything the billing page needs in one call.

        Returns:
            Dict with current plan, stored subscription row, usage, gates
            and usage percentages
        """
        plan_row = SupabaseClient.fetch_user_plan(user_id)
        usage = SubscriptionService.get_usage(user_id)

        subscription = None
        if plan_row:
            subscription = {
                "plan_id": plan_row.get("plan_id"),
                "status": plan_row.get("status"),
                "current_period_start": plan_row.get("current_period_start"),
                "current_period_end": plan_row.get("current_period_end"),
                "cancel_at_period_end": bool(plan_row.get("cancel_at_period_end")),
                "stripe_subscription_id": plan_row.get("stripe_subscription_id"),
                "stripe_customer_id": plan_row.get("stripe_customer_id"),
            }

        return {
            "current_plan": get_plan(usage["plan_id"]),
            "subscription": subscription,
            "usage": usage,
            "can_upload_image": usage["image_count"] < usage["max_images"],
            "can_create_catalog": usage["catalog_count"] < usage["max_catalogs"],
            "usage_percentage": {
                "images": calculate_usage_percentage(usage["image_count"], usage["max_images"]),
                "catalogs": calculate_usage_percentage(usage["catalog_count"], usage["max_catalogs"]),
            },
        }

    @staticmethod
    def list_plans() -> list[dict[str, Any]]:
        """Get the static plan table, cheapest first."""
        return sorted(PLANS.values(), key=lambda p: p["price"])

    # -------------------------------------------------------------------------
    # Enforcement
    # -------------------------------------------------------------------------

    @staticmethod
    def ensure_can_add_products(user_id: UUID | str, count: int = 1) -> None:
        """
        Check that `count` more products fit in the user's plan.

        Raises:
            PlanLimitExceededError: If the image limit would be exceeded
        """
        plan = SubscriptionService.get_effective_plan(user_id)
        current = SupabaseClient.count_rows("products", {"user_id": user_id}, exclude_archived=True)

        if current + count > plan["max_images"]:
            logger.info(f"Image limit reached for user {user_id}: {current}/{plan['max_images']}")
            raise PlanLimitExceededError("images", current, plan["max_images"], plan["id"])

    @staticmethod
    def ensure_can_create_catalog(user_id: UUID | str) -> None:
        """
        Check that one more catalog fits in the user's plan.

        Raises:
            PlanLimitExceededError: If the catalog limit would be exceeded
        """
        plan = SubscriptionService.get_effective_plan(user_id)
        current = SupabaseClient.count_rows("catalogs", {"user_id": user_id}, exclude_archived=True)

        if current + 1 > plan["max_catalogs"]:
            logger.info(f"Catalog limit reached for user {user_id}: {current}/{plan['max_catalogs']}")
            raise PlanLimitExceededError("catalogs", current, plan["max_catalogs"], plan["id"])
