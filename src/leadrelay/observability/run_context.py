"""Run ID management for log correlation.

Every coordinator run, manual replay and status API request executes under
a run id held in a ContextVar, so all log lines of one run correlate.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# Context variable for run_id (async-safe)
run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def generate_run_id() -> str:
    """Generate a new unique run ID (UUID v4)."""
    return str(uuid.uuid4())


def get_run_id() -> str:
    """Current run ID, or "no-run-id" outside a run."""
    return run_id_var.get() or "no-run-id"


def set_run_id(run_id: str) -> None:
    run_id_var.set(run_id)


@contextmanager
def run_scope(run_id: Optional[str] = None) -> Iterator[str]:
    """Bind a run ID for the duration of the block, restoring the previous one after.

    Usage:
        with run_scope() as run_id:
            coordinator.run()
    """
    token = run_id_var.set(run_id or generate_run_id())
    try:
        yield run_id_var.get()
    finally:
        run_id_var.reset(token)
