"""Per-message processing state machine and its store ports."""

from .ports import (
    LeadRecord,
    LeadStorePort,
    LeadUpsert,
    ProcessingRecord,
    ProcessingStorePort,
    merge_lead_values,
)
from .status import (
    ALLOWED_TRANSITIONS,
    InvalidTransitionError,
    ProcessingStatus,
    can_transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "InvalidTransitionError",
    "LeadRecord",
    "LeadStorePort",
    "LeadUpsert",
    "ProcessingRecord",
    "ProcessingStorePort",
    "ProcessingStatus",
    "can_transition",
    "merge_lead_values",
]
