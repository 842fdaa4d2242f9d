"""Round-robin lead assignment."""

from .ports import Recipient, RosterStorePort
from .selector import (
    AssignmentConflictError,
    NoEligibleRecipientError,
    RoundRobinSelector,
    selection_key,
)

__all__ = [
    "AssignmentConflictError",
    "NoEligibleRecipientError",
    "Recipient",
    "RosterStorePort",
    "RoundRobinSelector",
    "selection_key",
]
