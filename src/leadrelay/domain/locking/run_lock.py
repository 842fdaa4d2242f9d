"""TTL-boxed run lock.

Serializes coordinator runs across processes and hosts. A crashed holder
never blocks others for longer than the TTL.
"""

import logging
import os
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .ports import LockStorePort

logger = logging.getLogger(__name__)

DEFAULT_LOCK_NAME = "email_processor"
DEFAULT_TTL_SECONDS = 300

# Released locks expire at the epoch
RELEASED_AT = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_holder_id() -> str:
    """worker-<pid>-<epoch ms>"""
    return f"worker-{os.getpid()}-{int(time.time() * 1000)}"


class RunLock:
    """Mutual exclusion for coordinator runs over a shared lock store.

    Example:
        lock = RunLock(SqlLockStore(session_factory), ttl_seconds=300)
        if lock.acquire(holder_id=holder):
            try:
                ...
            finally:
                lock.release()
    """

    def __init__(
        self,
        store: LockStorePort,
        name: str = DEFAULT_LOCK_NAME,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.store = store
        self.name = name
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock

    def acquire(self, holder_id: Optional[str] = None, name: Optional[str] = None) -> bool:
        """Try to take the lock.

        Returns False (never raises) when another holder's lock is unexpired.
        Store failures propagate.
        """
        lock_name = name or self.name
        holder = holder_id or default_holder_id()
        now = self.clock()

        acquired = self.store.try_acquire(lock_name, holder, now, now + self.ttl)
        if acquired:
            logger.info(f"Acquired lock '{lock_name}' as {holder}")
        else:
            current = self.store.get(lock_name)
            if current is not None:
                logger.info(
                    f"Lock '{lock_name}' held by {current.locked_by}, "
                    f"expires at {current.expires_at.isoformat()}"
                )
        return acquired

    def release(self, name: Optional[str] = None) -> None:
        lock_name = name or self.name
        self.store.release(lock_name, RELEASED_AT)
        logger.info(f"Released lock '{lock_name}'")

    def extend(self, holder_id: str, name: Optional[str] = None) -> bool:
        """Refresh the TTL; only the current holder may extend."""
        lock_name = name or self.name
        extended = self.store.extend(lock_name, holder_id, self.clock() + self.ttl)
        if not extended:
            logger.warning(f"Could not extend lock '{lock_name}': not held by {holder_id}")
        return extended

    def is_locked(self, name: Optional[str] = None) -> bool:
        record = self.store.get(name or self.name)
        return record is not None and record.expires_at > self.clock()
