"""ProcessingStatus state machine for per-message processing records.

A message id gets one processing record. Every attempt moves it to
PROCESSING before any other work, then to SUCCESS or FAILED.
"""

from enum import Enum
from typing import Dict, List, Optional


class ProcessingStatus(str, Enum):
    """Processing record status

    State flow:
    (new) → PROCESSING → SUCCESS or FAILED
    FAILED can retry to PROCESSING
    """
    PROCESSING = "PROCESSING"  # Attempt in progress (or crashed mid-attempt)
    SUCCESS = "SUCCESS"        # Lead stored, reply handled, message acknowledged
    FAILED = "FAILED"          # Attempt failed (retryable below the ceiling)


# State transition rules for normal polling.
# PROCESSING → PROCESSING covers a worker that died mid-attempt.
ALLOWED_TRANSITIONS: Dict[Optional[ProcessingStatus], List[ProcessingStatus]] = {
    None: [ProcessingStatus.PROCESSING],
    ProcessingStatus.PROCESSING: [
        ProcessingStatus.SUCCESS,
        ProcessingStatus.FAILED,
        ProcessingStatus.PROCESSING,
    ],
    ProcessingStatus.SUCCESS: [],  # Terminal, manual replay only
    ProcessingStatus.FAILED: [ProcessingStatus.PROCESSING],
}

# Manual replay may reopen a successful record
REPLAY_TRANSITIONS: Dict[Optional[ProcessingStatus], List[ProcessingStatus]] = {
    **ALLOWED_TRANSITIONS,
    ProcessingStatus.SUCCESS: [ProcessingStatus.PROCESSING],
}


def can_transition(
    from_status: Optional[ProcessingStatus],
    to_status: ProcessingStatus,
    replay: bool = False,
) -> bool:
    """Validate if status transition is allowed

    Args:
        from_status: Current status (None for a message seen for the first time)
        to_status: Target status
        replay: True for a manually requested replay

    Example:
        >>> can_transition(ProcessingStatus.FAILED, ProcessingStatus.PROCESSING)
        True
        >>> can_transition(ProcessingStatus.SUCCESS, ProcessingStatus.PROCESSING)
        False
    """
    rules = REPLAY_TRANSITIONS if replay else ALLOWED_TRANSITIONS
    return to_status in rules.get(from_status, [])


class InvalidTransitionError(Exception):
    """Raised when a processing record would leave the state machine."""

    def __init__(self, message_id: str, from_status, to_status):
        self.message_id = message_id
        self.from_status = from_status
        self.to_status = to_status
        from_label = from_status.value if from_status else "NEW"
        super().__init__(
            f"Message {message_id}: cannot transition {from_label} -> {to_status.value}"
        )
