# =============================================================================
# tests/test_workers.py - Maintenance Task Tests
# =============================================================================
# Tasks are called directly, so they run in-process without a broker.
#
# Run with: pytest tests/test_workers.py -v
# =============================================================================

from unittest.mock import patch

import pytest

from core.services.archive_service import ArchiveService
from workers.celery_app import celery_app
from workers.tasks import enforce_plan_limits, purge_expired_archives, reconcile_user_plan


class TestTasks:
    """Tests for the scheduled maintenance tasks."""

    def test_purge_reports_counts(self, fake_db, r2, make_product):
        make_product(archived_at="2020-01-01T00:00:00+00:00", delete_at="2020-02-01T00:00:00+00:00")

        result = purge_expired_archives()

        assert result == {"success": True, "products": 1, "catalogs": 0}
        assert fake_db.rows("products") == []

    def test_purge_failure_propagates(self, fake_db):
        fake_db.fail_tables["products"] = "select"

        with pytest.raises(RuntimeError):
            purge_expired_archives()

    def test_reconcile_user_archives_excess(self, fake_db, user_id, make_product):
        for _ in range(5):
            make_product()

        result = reconcile_user_plan(user_id)

        assert result["user_id"] == user_id
        assert result["archived"]["products"] == 1
        assert result["restored"]["products"] == 0

    def test_enforce_continues_after_failure(self, fake_db, user_id, other_user_id, make_product):
        make_product()
        make_product(owner=other_user_id)

        with patch.object(ArchiveService, "reconcile", side_effect=[RuntimeError("boom"), {}]) as reconcile:
            result = enforce_plan_limits()

        assert reconcile.call_count == 2
        assert result == {"success": False, "checked": 2, "failed": [user_id]}


def test_beat_schedule_registers_daily_jobs():
    schedule = celery_app.conf.beat_schedule

    assert schedule["purge-expired-archives"]["task"] == "workers.tasks.purge_expired_archives"
    assert schedule["enforce-plan-limits"]["task"] == "workers.tasks.enforce_plan_limits"
