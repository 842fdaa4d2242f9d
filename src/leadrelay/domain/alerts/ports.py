"""Alert port: fire-and-forget operator notifications."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from leadrelay.workers.coordinator import RunSummary

logger = logging.getLogger(__name__)


@dataclass
class FailureNotification:
    """A message that failed processing."""
    message_id: str
    error: str
    attempts: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AlertPort(ABC):
    """Port interface for alert channels (Slack, Discord, ...)."""

    @abstractmethod
    def notify_failure(self, notification: FailureNotification) -> None:
        pass

    @abstractmethod
    def notify_run_summary(self, summary: "RunSummary") -> None:
        pass


class NullAlerter(AlertPort):
    """Alerter used when no channel is configured."""

    def notify_failure(self, notification: FailureNotification) -> None:
        logger.info("No alert channels configured, skipping failure notification")

    def notify_run_summary(self, summary: "RunSummary") -> None:
        pass


def send_detached(send: Callable[..., None], *args, **kwargs) -> bool:
    """Call an alert function; log and drop any exception it raises.

    Alert delivery must never replace or mask the error being reported.

    Returns:
        True if the call completed, False if it raised
    """
    try:
        send(*args, **kwargs)
        return True
    except Exception as e:
        logger.error(f"Failed to send alert: {e}", exc_info=True)
        return False
