"""Slack and Discord webhook alerter.

Posts failure alerts and run summaries to whichever webhooks are configured.
Delivery is best effort: HTTP errors are logged and counted, never raised.
"""

import logging
from typing import Any, Dict, Optional

import requests

from ...domain.alerts.ports import AlertPort, FailureNotification
from ...observability.metrics import alerts_sent_total

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 500
ALERT_TITLE = "🚨 Email Processing Failed"


def truncate_error(error: str, limit: int = MAX_ERROR_LENGTH) -> str:
    """Cut long errors (tracebacks) to keep payloads small."""
    return error[:limit] + "..." if len(error) > limit else error


def build_slack_failure_payload(notification: FailureNotification, error: str) -> Dict[str, Any]:
    return {
        "blocks": [
            {
                "type": "header",
                "text": {"type": "plain_text", "text": ALERT_TITLE, "emoji": True},
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*Message ID:*\n`{notification.message_id}`"},
                    {"type": "mrkdwn", "text": f"*Attempts:*\n{notification.attempts}"},
                ],
            },
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"*Error:*\n```{error}```"},
            },
            {
                "type": "context",
                "elements": [
                    {"type": "mrkdwn", "text": f"Timestamp: {notification.timestamp.isoformat()}"},
                ],
            },
        ]
    }


def build_discord_failure_payload(notification: FailureNotification, error: str) -> Dict[str, Any]:
    return {
        "embeds": [
            {
                "title": ALERT_TITLE,
                "color": 0xFF0000,
                "fields": [
                    {"name": "Message ID", "value": f"`{notification.message_id}`", "inline": True},
                    {"name": "Attempts", "value": str(notification.attempts), "inline": True},
                    {"name": "Error", "value": f"```{error}```"},
                ],
                "timestamp": notification.timestamp.isoformat(),
            }
        ]
    }


def format_run_summary(summary) -> str:
    return (
        "✅ Email Relay Run Complete\n"
        f"• Processed: {summary.processed}\n"
        f"• Successful: {summary.successful}\n"
        f"• Failed: {summary.failed}\n"
        f"• Duration: {summary.duration_seconds:.1f}s"
    )


class WebhookAlerter(AlertPort):
    """AlertPort posting to Slack and/or Discord incoming webhooks.

    Example:
        alerter = WebhookAlerter(slack_url=settings.SLACK_WEBHOOK_URL)
        alerter.notify_failure(FailureNotification(message_id="42", error="...", attempts=1))
    """

    def __init__(
        self,
        slack_url: Optional[str] = None,
        discord_url: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.slack_url = slack_url
        self.discord_url = discord_url
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.slack_url or self.discord_url)

    def _post(self, channel: str, url: str, payload: Dict[str, Any]) -> bool:
        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"{channel.title()} webhook failed: {e}")
            alerts_sent_total.labels(channel=channel, status="error").inc()
            return False

        logger.info(f"{channel.title()} notification sent")
        alerts_sent_total.labels(channel=channel, status="success").inc()
        return True

    def notify_failure(self, notification: FailureNotification) -> None:
        if not self.configured:
            logger.info("No webhook URLs configured, skipping notification")
            return

        error = truncate_error(notification.error)
        if self.slack_url:
            self._post("slack", self.slack_url, build_slack_failure_payload(notification, error))
        if self.discord_url:
            self._post("discord", self.discord_url, build_discord_failure_payload(notification, error))

    def notify_run_summary(self, summary) -> None:
        if not self.configured:
            return

        message = format_run_summary(summary)
        if self.slack_url:
            self._post("slack", self.slack_url, {"text": message})
        if self.discord_url:
            self._post("discord", self.discord_url, {"content": message})
