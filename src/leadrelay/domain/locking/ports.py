"""Lock store port for the run lock."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class LockRecord:
    """Stored lock row. Held iff expires_at is in the future."""
    name: str
    locked_by: Optional[str]
    expires_at: datetime


class LockStorePort(ABC):
    """Each method must be a single atomic conditional write against the store."""

    @abstractmethod
    def try_acquire(self, name: str, holder_id: str, now: datetime, expires_at: datetime) -> bool:
        """Take the lock if no record exists or the existing one expired at or before now."""
        pass

    @abstractmethod
    def release(self, name: str, released_at: datetime) -> None:
        """Clear the holder and move expiry to released_at. Missing lock is a no-op."""
        pass

    @abstractmethod
    def extend(self, name: str, holder_id: str, expires_at: datetime) -> bool:
        """Push expiry out, only if holder_id currently holds the lock."""
        pass

    @abstractmethod
    def get(self, name: str) -> Optional[LockRecord]:
        pass
