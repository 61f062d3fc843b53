# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# scheduled catalog maintenance (archive purge, plan-limit reconciliation).
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (purge, reconciliation)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker --loglevel=info
#
#   # Start the scheduler for the daily jobs
#   celery -A workers.celery_app beat --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import reconcile_user_plan
#   result = reconcile_user_plan.delay(user_id)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
