# =============================================================================
# core/services/admin_service.py - Admin Analytics, Users and Wipe
# =============================================================================
# Operator-only views across all tenants. Routes guard these with admin
# tokens; nothing here checks ownership.
# =============================================================================

import logging
from collections import Counter, defaultdict
from typing import Any

from lib.supabase_client import SupabaseClient
from core.plans import FREE_PLAN_ID
from core.services.storage_service import StorageService

logger = logging.getLogger(__name__)

TOP_USERS_LIMIT = 10

# Delete order for a database wipe (children before parents) and a column
# every row has, for the mandatory PostgREST delete filter
WIPE_TABLES: tuple[tuple[str, str], ...] = (
    ("customer_responses", "id"),
    ("catalog_products", "catalog_id"),
    ("catalogs", "id"),
    ("products", "id"),
    ("unprocessed_products", "id"),
    ("company_profiles", "user_id"),
    ("user_subscriptions", "id"),
    ("user_plans", "user_id"),
    ("stripe_events", "id"),
)

_NIL_UUID = "00000000-0000-0000-0000-000000000000"

SUBSCRIPTION_STATUSES = ("active", "trialing", "canceled", "past_due", "unpaid")


def _counts_by_user(table: str) -> Counter:
    client = SupabaseClient.get_client()
    rows = client.table(table).select("user_id").execute().data or []
    return Counter(row["user_id"] for row in rows if row.get("user_id"))


def _attr(obj: Any, name: str) -> Any:
    """Read a field from a supabase auth User object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


class AdminService:
    """Service for admin dashboards and maintenance."""

    @staticmethod
    def get_analytics() -> dict[str, Any]:
        """
        Aggregate platform-wide usage.

        Returns:
            {
                "totals": {totalProducts, totalCatalogs, totalSubscriptions, activeSubscriptions},
                "breakdown": {plan_id: {status: count}},
                "topProducts": [{"user_id", "count"}],
                "topCatalogs": [{"user_id", "count"}],
            }
        """
        client = SupabaseClient.get_client()

        products_by_user = _counts_by_user("products")
        catalogs_by_user = _counts_by_user("catalogs")
        plans = client.table("user_plans").select("plan_id, status").execute().data or []

        breakdown: dict[str, dict[str, int]] = defaultdict(
            lambda: {status: 0 for status in SUBSCRIPTION_STATUSES}
        )
        active = 0
        for row in plans:
            plan = row.get("plan_id") or "unknown"
            status = row.get("status") or "unknown"
            counts = breakdown[plan]
            counts[status] = counts.get(status, 0) + 1
            if status == "active":
                active += 1

        return {
            "totals": {
                "totalProducts": sum(products_by_user.values()),
                "totalCatalogs": sum(catalogs_by_user.values()),
                "totalSubscriptions": SupabaseClient.count_rows("user_subscriptions", {}),
                "activeSubscriptions": active,
            },
            "breakdown": dict(breakdown),
            "topProducts": [
                {"user_id": user_id, "count": count}
                for user_id, count in products_by_user.most_common(TOP_USERS_LIMIT)
            ],
            "topCatalogs": [
                {"user_id": user_id, "count": count}
                for user_id, count in catalogs_by_user.most_common(TOP_USERS_LIMIT)
            ],
        }

    @staticmethod
    def list_users(page: int = 1, per_page: int = 1000) -> list[dict[str, Any]]:
        """
        List auth users with their plan and usage.

        Users without a user_plans row are reported on the free plan.
        """
        client = SupabaseClient.get_client()

        users = client.auth.admin.list_users(page=page, per_page=per_page) or []
        plans = client.table("user_plans").select("*").execute().data or []
        plans_by_user = {p["user_id"]: p for p in plans}
        products_by_user = _counts_by_user("products")
        catalogs_by_user = _counts_by_user("catalogs")

        rows = []
        for user in users:
            user_id = str(_attr(user, "id"))
            plan = plans_by_user.get(user_id, {})
            rows.append({
                "user_id": user_id,
                "email": _attr(user, "email"),
                "plan_id": plan.get("plan_id") or FREE_PLAN_ID,
                "status": plan.get("status") or "active",
                "current_period_end": plan.get("current_period_end"),
                "images": products_by_user.get(user_id, 0),
                "catalogs": catalogs_by_user.get(user_id, 0),
            })
        return rows

    @staticmethod
    def wipe_database() -> dict[str, int]:
        """
        Delete every row of every application table, children first.

        Returns:
            Table name -> deleted row count
        """
        client = SupabaseClient.get_client()
        deleted: dict[str, int] = {}

        for table, column in WIPE_TABLES:
            response = client.table(table).delete().neq(column, _NIL_UUID).execute()
            deleted[table] = len(response.data or [])
            logger.warning(f"Wiped {deleted[table]} rows from {table}")

        return deleted

    @staticmethod
    def wipe(scope: str) -> dict[str, Any]:
        """
        Destructive reset of storage and/or database.

        Args:
            scope: "all", "storage" or "db"

        Returns:
            {"storage": {...} | None, "db": {...} | None}
        """
        logger.warning(f"Admin wipe requested (scope={scope})")
        results: dict[str, Any] = {"storage": None, "db": None}

        if scope in ("all", "storage"):
            results["storage"] = StorageService.wipe_bucket()
        if scope in ("all", "db"):
            results["db"] = {"deleted": AdminService.wipe_database()}

        return results
