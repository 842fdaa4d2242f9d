"""Integration tests for the Celery task wrappers"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from leadrelay.workers import tasks


class TestLeadTasks:
    """Tasks delegate to the shared service graph"""

    def test_run_once_task_returns_summary(self, seeded_services, mailbox):
        mailbox.add("1", text="Email: ann@example.com")

        with patch.object(tasks, "get_services", return_value=seeded_services):
            result = tasks.run_once_task()

        assert result["lock_acquired"] is True
        assert result["processed"] == 1
        assert result["successful"] == 1

    def test_run_once_task_lock_held(self, seeded_services):
        seeded_services.lock.acquire("other-worker")

        with patch.object(tasks, "get_services", return_value=seeded_services):
            result = tasks.run_once_task()

        assert result["lock_acquired"] is False
        assert result["processed"] == 0

    def test_process_one_task(self, seeded_services, mailbox):
        mailbox.add("1", text="Email: ann@example.com")

        with patch.object(tasks, "get_services", return_value=seeded_services):
            result = tasks.process_one_task("1")

        assert result["success"] is True
        assert result["recipient_name"] == "Alice Agent"
        assert result["lead_id"] is not None

    def test_daily_digest_task(self, seeded_services, mailbox, alerter):
        seeded_services.settings.RETRY_MAX_ATTEMPTS = 1
        seeded_services.reporting.max_attempts = 1
        mailbox.add("1", text="no address")
        seeded_services.processor.process("1")
        alerter.failures.clear()

        with patch.object(tasks, "get_services", return_value=seeded_services):
            result = tasks.daily_digest_task()

        assert result == {"status": "completed", "realerted": 1}
        assert alerter.failures[0].message_id == "1"

    def test_purge_processed_task(self, seeded_services):
        with patch.object(tasks, "get_services", return_value=seeded_services):
            result = tasks.purge_processed_task(older_than_days=7)

        assert result["status"] == "completed"
        assert result["deleted"] == 0
        cutoff = datetime.fromisoformat(result["cutoff"])
        assert cutoff < datetime.now(timezone.utc) - timedelta(days=6)
