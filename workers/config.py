# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Broker, serialization and the beat schedule for the maintenance jobs.
# =============================================================================

from celery.schedules import crontab

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    Applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge after completion so a crashed worker's job is redelivered
    task_acks_late = True
    worker_prefetch_multiplier = 1

    # Results are only kept for inspection
    result_expires = 86400

    # A full sweep touches every user; allow 30 minutes
    task_time_limit = 1800
    task_soft_time_limit = 1700

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_default_queue = "maintenance"

    # -------------------------------------------------------------------------
    # Retry Settings
    # -------------------------------------------------------------------------

    task_annotations = {
        "workers.tasks.purge_expired_archives": {
            "max_retries": 3,
            "default_retry_delay": 300,
        }
    }

    # -------------------------------------------------------------------------
    # Schedule (celery beat)
    # -------------------------------------------------------------------------

    beat_schedule = {
        "purge-expired-archives": {
            "task": "workers.tasks.purge_expired_archives",
            "schedule": crontab(hour=3, minute=0),
        },
        "enforce-plan-limits": {
            "task": "workers.tasks.enforce_plan_limits",
            "schedule": crontab(hour=3, minute=30),
        },
    }

    # -------------------------------------------------------------------------
    # Timezone
    # -------------------------------------------------------------------------

    timezone = "UTC"
    enable_utc = True
