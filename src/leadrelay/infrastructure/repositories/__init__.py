"""SQL implementations of the domain store ports."""

from .lead_store import SqlLeadStore
from .lock_store import SqlLockStore
from .processing_store import SqlProcessingStore
from .roster_store import SqlRosterStore

__all__ = ["SqlLeadStore", "SqlLockStore", "SqlProcessingStore", "SqlRosterStore"]
