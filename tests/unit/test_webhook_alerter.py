"""Unit tests for Slack/Discord webhook alerts"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import requests

from leadrelay.domain.alerts.ports import FailureNotification, NullAlerter, send_detached
from leadrelay.infrastructure.alerts.webhook import (
    WebhookAlerter,
    build_discord_failure_payload,
    build_slack_failure_payload,
    format_run_summary,
    truncate_error,
)

SLACK_URL = "https://hooks.slack.example/T000/B000/XXX"
DISCORD_URL = "https://discord.example/api/webhooks/1/abc"


def make_notification(error="LeadParseError: no email"):
    return FailureNotification(
        message_id="1042",
        error=error,
        attempts=2,
        timestamp=datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc),
    )


class TestPayloads:
    """Test payload builders"""

    def test_truncate_error(self):
        assert truncate_error("x" * 10, limit=20) == "x" * 10
        assert truncate_error("x" * 600) == "x" * 500 + "..."

    def test_slack_payload(self):
        payload = build_slack_failure_payload(make_notification(), "boom")
        blocks = payload["blocks"]
        assert blocks[0]["type"] == "header"
        assert "`1042`" in blocks[1]["fields"][0]["text"]
        assert "2" in blocks[1]["fields"][1]["text"]
        assert "```boom```" in blocks[2]["text"]["text"]
        assert "2026-03-01T08:30:00+00:00" in blocks[3]["elements"][0]["text"]

    def test_discord_payload(self):
        embed = build_discord_failure_payload(make_notification(), "boom")["embeds"][0]
        assert embed["color"] == 0xFF0000
        assert embed["fields"][0]["value"] == "`1042`"
        assert embed["fields"][1]["value"] == "2"
        assert embed["timestamp"] == "2026-03-01T08:30:00+00:00"

    def test_run_summary_text(self):
        summary = SimpleNamespace(processed=5, successful=4, failed=1, duration_seconds=2.345)
        text = format_run_summary(summary)
        assert "Processed: 5" in text
        assert "Failed: 1" in text
        assert "Duration: 2.3s" in text


class TestWebhookAlerter:
    """Test webhook delivery through requests.post"""

    @patch("leadrelay.infrastructure.alerts.webhook.requests.post")
    def test_posts_to_both_channels(self, mock_post):
        mock_post.return_value = MagicMock(status_code=200)
        alerter = WebhookAlerter(slack_url=SLACK_URL, discord_url=DISCORD_URL, timeout=5)

        alerter.notify_failure(make_notification())

        assert mock_post.call_count == 2
        urls = [c.args[0] for c in mock_post.call_args_list]
        assert urls == [SLACK_URL, DISCORD_URL]
        for c in mock_post.call_args_list:
            assert c.kwargs["timeout"] == 5
        assert "blocks" in mock_post.call_args_list[0].kwargs["json"]
        assert "embeds" in mock_post.call_args_list[1].kwargs["json"]

    @patch("leadrelay.infrastructure.alerts.webhook.requests.post")
    def test_long_errors_truncated(self, mock_post):
        mock_post.return_value = MagicMock(status_code=200)
        alerter = WebhookAlerter(discord_url=DISCORD_URL)

        alerter.notify_failure(make_notification(error="E" * 2000))

        fields = mock_post.call_args.kwargs["json"]["embeds"][0]["fields"]
        assert fields[2]["value"] == "```" + "E" * 500 + "...```"

    @patch("leadrelay.infrastructure.alerts.webhook.requests.post")
    def test_http_error_is_swallowed(self, mock_post):
        """Test a failing webhook never raises into the caller"""
        response = MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500 Server Error")
        mock_post.return_value = response
        alerter = WebhookAlerter(slack_url=SLACK_URL)

        alerter.notify_failure(make_notification())

        mock_post.assert_called_once()

    @patch("leadrelay.infrastructure.alerts.webhook.requests.post")
    def test_connection_error_does_not_block_other_channel(self, mock_post):
        mock_post.side_effect = [
            requests.exceptions.ConnectionError("refused"),
            MagicMock(status_code=204),
        ]
        alerter = WebhookAlerter(slack_url=SLACK_URL, discord_url=DISCORD_URL)

        alerter.notify_failure(make_notification())

        assert mock_post.call_count == 2

    @patch("leadrelay.infrastructure.alerts.webhook.requests.post")
    def test_unconfigured_sends_nothing(self, mock_post):
        alerter = WebhookAlerter()
        alerter.notify_failure(make_notification())
        alerter.notify_run_summary(SimpleNamespace(processed=1, successful=1, failed=0, duration_seconds=1.0))
        mock_post.assert_not_called()

    @patch("leadrelay.infrastructure.alerts.webhook.requests.post")
    def test_run_summary_posts_text(self, mock_post):
        mock_post.return_value = MagicMock(status_code=200)
        alerter = WebhookAlerter(slack_url=SLACK_URL, discord_url=DISCORD_URL)

        alerter.notify_run_summary(SimpleNamespace(processed=3, successful=3, failed=0, duration_seconds=0.5))

        assert "text" in mock_post.call_args_list[0].kwargs["json"]
        assert "content" in mock_post.call_args_list[1].kwargs["json"]


class TestSendDetached:
    """Test the detach-and-log wrapper"""

    def test_returns_true_on_success(self):
        calls = []
        assert send_detached(calls.append, "x") is True
        assert calls == ["x"]

    def test_swallows_exceptions(self):
        def explode(_):
            raise RuntimeError("webhook down")

        assert send_detached(explode, make_notification()) is False

    def test_null_alerter_is_silent(self):
        NullAlerter().notify_failure(make_notification())
        NullAlerter().notify_run_summary(None)
