# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Periodic maintenance for plan limits and archived content.
#
# Tasks:
# - purge_expired_archives: Hard-delete archived items past their delete_at
# - enforce_plan_limits: Reconcile every user's live items with their plan
# - reconcile_user_plan: Reconcile a single user (on demand)
# =============================================================================

import logging
from typing import Any

from celery import shared_task

from core.services.archive_service import ArchiveService

logger = logging.getLogger(__name__)


# =============================================================================
# Archive Maintenance
# =============================================================================

@shared_task(bind=True, name="workers.tasks.purge_expired_archives")
def purge_expired_archives(self) -> dict[str, Any]:
    """
    Delete items archived on downgrade once their grace period is over.

    Runs daily via Celery beat.

    Returns:
        Dict with deleted product and catalog counts
    """
    logger.info(f"Purging expired archives (task {self.request.id})")

    try:
        result = ArchiveService.purge_expired()
    except Exception as e:
        logger.exception(f"Purge of expired archives failed: {e}")
        raise self.retry(exc=e)

    logger.info(f"Purged {result.get('products', 0)} products and {result.get('catalogs', 0)} catalogs")
    return {"success": True, **result}


@shared_task(bind=True, name="workers.tasks.reconcile_user_plan")
def reconcile_user_plan(self, user_id: str) -> dict[str, Any]:
    """
    Archive or restore one user's items to match their current plan.

    Args:
        user_id: The user UUID

    Returns:
        Dict with per-table archived and restored counts
    """
    result = ArchiveService.reconcile(user_id)
    logger.info(f"Reconciled plan limits for user {user_id}: {result}")
    return {"success": True, "user_id": user_id, **result}


@shared_task(bind=True, name="workers.tasks.enforce_plan_limits")
def enforce_plan_limits(self) -> dict[str, Any]:
    """
    Reconcile every user that owns products or catalogs.

    Catches subscription changes whose webhook was missed. A failure for
    one user is logged and the sweep continues.

    Returns:
        Dict with the number of users checked and the ids that failed
    """
    user_ids = ArchiveService.list_users_with_content()
    logger.info(f"Enforcing plan limits for {len(user_ids)} users")

    failed: list[str] = []
    for user_id in user_ids:
        try:
            ArchiveService.reconcile(user_id)
        except Exception as e:
            logger.error(f"Plan reconciliation failed for user {user_id}: {e}")
            failed.append(user_id)

    return {"success": not failed, "checked": len(user_ids), "failed": failed}
