"""Alert channel adapters."""

from .webhook import WebhookAlerter

__all__ = ["WebhookAlerter"]
