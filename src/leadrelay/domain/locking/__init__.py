"""Run lock (TTL-boxed mutual exclusion)."""

from .ports import LockRecord, LockStorePort
from .run_lock import DEFAULT_LOCK_NAME, DEFAULT_TTL_SECONDS, RunLock, default_holder_id

__all__ = [
    "DEFAULT_LOCK_NAME",
    "DEFAULT_TTL_SECONDS",
    "LockRecord",
    "LockStorePort",
    "RunLock",
    "default_holder_id",
]
