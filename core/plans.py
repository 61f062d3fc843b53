# =============================================================================
# core/plans.py - Subscription Plan Table
# =============================================================================
# Static per-plan limits. Limits are never stored on the subscription row;
# they are always looked up here by plan id.
# =============================================================================

from typing import Any

FREE_PLAN_ID = "free"

# Subscription statuses that keep a paid plan's entitlements
ENTITLED_STATUSES = frozenset({"active", "trialing", "past_due"})

PLANS: dict[str, dict[str, Any]] = {
    "free": {
        "id": "free",
        "name": "Free Plan",
        "description": "Perfect for getting started with basic catalog management",
        "price": 0,
        "currency": "usd",
        "interval": "month",
        "max_images": 4,
        "max_catalogs": 2,
        "features": [
            "Upload up to 4 images",
            "Create up to 2 catalogs",
            "Customer feedback",
            "Email support",
        ],
    },
    "starter": {
        "id": "starter",
        "name": "Starter Plan",
        "description": "For growing businesses that need multiple catalogs",
        "price": 10,
        "currency": "usd",
        "interval": "month",
        "max_images": 6,
        "max_catalogs": 4,
        "features": [
            "Upload up to 6 images",
            "Create up to 4 catalogs",
            "Customer feedback",
            "Email support",
        ],
    },
}


def get_plan(plan_id: str | None) -> dict[str, Any]:
    """Get a plan by id, falling back to the free plan for unknown ids."""
    return PLANS.get(plan_id or FREE_PLAN_ID, PLANS[FREE_PLAN_ID])


def is_paid_plan(plan_id: str | None) -> bool:
    """True for known plans with a non-zero price."""
    return plan_id in PLANS and PLANS[plan_id]["price"] > 0


def effective_plan_id(plan_row: dict[str, Any] | None) -> str:
    """
    Resolve which plan's limits apply to a user.

    A stored plan only counts while its subscription status still grants
    access; canceled, unpaid or incomplete subscriptions fall back to free.

    Args:
        plan_row: user_plans row, or None

    Returns:
        Plan id whose limits apply
    """
    if not plan_row:
        return FREE_PLAN_ID
    plan_id = plan_row.get("plan_id")
    if plan_id not in PLANS:
        return FREE_PLAN_ID
    if plan_id != FREE_PLAN_ID and plan_row.get("status") not in ENTITLED_STATUSES:
        return FREE_PLAN_ID
    return plan_id


def calculate_usage_percentage(current: int, limit: int) -> float:
    """Usage as a percentage of the limit, capped at 100."""
    if limit <= 0:
        return 100.0
    return min((current / limit) * 100, 100.0)
