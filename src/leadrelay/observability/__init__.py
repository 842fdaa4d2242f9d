"""Observability module for Lead Relay.

Provides structured logging, run ID correlation, metrics and health checks.
"""

from .health import ComponentHealth, HealthStatus
from .logging_config import configure_logging, get_logger
from .run_context import generate_run_id, get_run_id, run_id_var, run_scope, set_run_id

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Run ID
    "run_id_var",
    "generate_run_id",
    "get_run_id",
    "set_run_id",
    "run_scope",
    # Health
    "HealthStatus",
    "ComponentHealth",
]
