"""Operational reporting and maintenance."""

from .service import ReportingService, format_success_rate, truncate_digest_error

__all__ = ["ReportingService", "format_success_rate", "truncate_digest_error"]
