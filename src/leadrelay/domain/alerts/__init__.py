"""Operator alerting."""

from .ports import AlertPort, FailureNotification, NullAlerter, send_detached

__all__ = ["AlertPort", "FailureNotification", "NullAlerter", "send_detached"]
