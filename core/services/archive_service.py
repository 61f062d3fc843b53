# =============================================================================
# core/services/archive_service.py - Plan Downgrade Archival
# =============================================================================
# When a user's effective plan shrinks, the newest products and catalogs
# above the new limits are archived and scheduled for deletion after a
# grace period. Upgrading again restores them, oldest first.
#
# Called from the Stripe webhook on plan changes and from the daily Celery
# jobs (reconciliation + purge).
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid
from core.services.storage_service import StorageService
from core.services.subscription_service import SubscriptionService
from app.config import settings

logger = logging.getLogger(__name__)

DOWNGRADE_REASON = "plan_downgrade"

# Archivable tables and the plan limit that governs each
ARCHIVABLE = (
    ("products", "max_images"),
    ("catalogs", "max_catalogs"),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ArchiveService:
    """Service for plan-limit archival, restore and purge."""

    @staticmethod
    def archive_excess(user_id: UUID | str, now: datetime | None = None) -> dict[str, int]:
        """
        Archive the newest items above the user's current plan limits.

        Args:
            user_id: The user
            now: Override the current time (tests)

        Returns:
            {"products": archived count, "catalogs": archived count}
        """
        now = now or _utcnow()
        delete_at = now + timedelta(days=settings.ARCHIVE_GRACE_DAYS)
        plan = SubscriptionService.get_effective_plan(user_id)
        client = SupabaseClient.get_client()
        result: dict[str, int] = {}

        for table, limit_key in ARCHIVABLE:
            rows = (
                client.table(table)
                .select("id, created_at")
                .eq("user_id", normalize_uuid(user_id))
                .is_("archived_at", "null")
                .order("created_at", desc=True)
                .execute()
            ).data or []

            excess = len(rows) - plan[limit_key]
            if excess <= 0:
                result[table] = 0
                continue

            ids = [row["id"] for row in rows[:excess]]
            (
                client.table(table)
                .update({
                    "archived_at": now.isoformat(),
                    "delete_at": delete_at.isoformat(),
                    "archived_reason": DOWNGRADE_REASON,
                })
                .in_("id", ids)
                .execute()
            )
            result[table] = len(ids)
            logger.info(
                f"Archived {len(ids)} {table} for user {user_id} "
                f"(plan {plan['id']}, delete after {delete_at.date()})"
            )

        return result

    @staticmethod
    def restore_archived(user_id: UUID | str) -> dict[str, int]:
        """
        Restore downgrade-archived items, oldest first, up to the plan limits.

        Items archived for any other reason are left alone.

        Returns:
            {"products": restored count, "catalogs": restored count}
        """
        plan = SubscriptionService.get_effective_plan(user_id)
        client = SupabaseClient.get_client()
        result: dict[str, int] = {}

        for table, limit_key in ARCHIVABLE:
            live = SupabaseClient.count_rows(table, {"user_id": user_id}, exclude_archived=True)
            room = plan[limit_key] - live
            if room <= 0:
                result[table] = 0
                continue

            rows = (
                client.table(table)
                .select("id")
                .eq("user_id", normalize_uuid(user_id))
                .eq("archived_reason", DOWNGRADE_REASON)
                .order("created_at")
                .limit(room)
                .execute()
            ).data or []

            ids = [row["id"] for row in rows]
            if ids:
                (
                    client.table(table)
                    .update({"archived_at": None, "delete_at": None, "archived_reason": None})
                    .in_("id", ids)
                    .execute()
                )
                logger.info(f"Restored {len(ids)} {table} for user {user_id} (plan {plan['id']})")
            result[table] = len(ids)

        return result

    @staticmethod
    def reconcile(user_id: UUID | str, now: datetime | None = None) -> dict[str, dict[str, int]]:
        """
        Bring a user's live items in line with their current plan.

        Archives excess items, then restores archived ones if there is room.
        At most one of the two does anything for a given plan.
        """
        return {
            "archived": ArchiveService.archive_excess(user_id, now=now),
            "restored": ArchiveService.restore_archived(user_id),
        }

    @staticmethod
    def list_users_with_content() -> list[str]:
        """Get ids of every user owning products or catalogs."""
        client = SupabaseClient.get_client()
        user_ids: set[str] = set()
        for table, _ in ARCHIVABLE:
            rows = client.table(table).select("user_id").execute().data or []
            user_ids.update(row["user_id"] for row in rows if row.get("user_id"))
        return sorted(user_ids)

    @staticmethod
    def purge_expired(now: datetime | None = None) -> dict[str, Any]:
        """
        Hard-delete archived items whose grace period is over.

        Product images are removed from storage best-effort. Catalogs take
        their product links and customer responses with them.

        Returns:
            {"products": deleted count, "catalogs": deleted count}
        """
        now = now or _utcnow()
        client = SupabaseClient.get_client()

        products = (
            client.table("products")
            .select("id, user_id, image_url, original_image_url")
            .lte("delete_at", now.isoformat())
            .execute()
        ).data or []
        product_ids = [p["id"] for p in products]
        if product_ids:
            client.table("catalog_products").delete().in_("product_id", product_ids).execute()
            client.table("products").delete().in_("id", product_ids).execute()
            for product in products:
                StorageService.delete_image_url(product["user_id"], product.get("image_url"))
                if product.get("original_image_url") != product.get("image_url"):
                    StorageService.delete_image_url(product["user_id"], product.get("original_image_url"))

        catalogs = (
            client.table("catalogs")
            .select("id")
            .lte("delete_at", now.isoformat())
            .execute()
        ).data or []
        catalog_ids = [c["id"] for c in catalogs]
        if catalog_ids:
            client.table("catalog_products").delete().in_("catalog_id", catalog_ids).execute()
            client.table("customer_responses").delete().in_("catalog_id", catalog_ids).execute()
            client.table("catalogs").delete().in_("id", catalog_ids).execute()

        logger.info(f"Purged {len(product_ids)} products and {len(catalog_ids)} catalogs past their grace period")
        return {"products": len(product_ids), "catalogs": len(catalog_ids)}
