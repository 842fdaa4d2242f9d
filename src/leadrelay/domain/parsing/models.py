"""Lead parsing domain models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional


class LeadSource(str, Enum):
    """Known lead sources.

    ZILLOW / REALTOR / FACEBOOK: matched by a source-specific recognizer
    GENERIC: matched by the fallback recognizer
    UNKNOWN: source could not be determined (manual entries)
    """
    ZILLOW = "zillow"
    REALTOR = "realtor"
    FACEBOOK = "facebook"
    GENERIC = "generic"
    UNKNOWN = "unknown"


@dataclass
class LeadCandidate:
    """Unvalidated lead a recognizer believes it extracted.

    email is the only mandatory field. raw_data collects whatever extra
    labeled values the recognizer picked up (property address, price,
    form fields, subject line).
    """
    email: str
    source: LeadSource
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    raw_data: Dict[str, str] = field(default_factory=dict)

    @property
    def full_name(self) -> Optional[str]:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or None


# (text, subject) -> candidate, or None when the recognizer does not apply
Recognizer = Callable[[str, str], Optional[LeadCandidate]]
