"""Recognizer chain.

Recognizers are tried in order of specificity. The generic recognizer is
always last and catches anything carrying a usable email address.
"""

import logging
from typing import List, Optional

from leadrelay.exceptions import LeadRelayError

from .models import LeadCandidate, Recognizer
from .recognizers import (
    parse_facebook_lead,
    parse_generic_lead,
    parse_realtor_lead,
    parse_zillow_lead,
)
from .validators import is_valid_email

logger = logging.getLogger(__name__)

RECOGNIZERS = (
    parse_zillow_lead,
    parse_realtor_lead,
    parse_facebook_lead,
    parse_generic_lead,
)


class LeadParseError(LeadRelayError):
    """No recognizer could extract a lead with a valid email address."""
    pass


class EmptyMessageError(LeadRelayError):
    """Message has neither a text nor an HTML body."""
    pass


def parse_lead_from_text(text: str, subject: str = "") -> LeadCandidate:
    """Parse a lead from message text.

    Args:
        text: Message body (plain text preferred)
        subject: Message subject line

    Returns:
        First candidate whose email passes validation

    Raises:
        LeadParseError: If no recognizer yields a valid email
    """
    for recognizer in RECOGNIZERS:
        candidate = recognizer(text, subject)
        if candidate and is_valid_email(candidate.email):
            logger.debug(f"Matched lead source: {candidate.source.value}")
            return candidate

    raise LeadParseError("Could not parse lead data from email. No valid email address found.")


def try_parse_lead_from_text(text: str, subject: str = "") -> Optional[LeadCandidate]:
    """Like parse_lead_from_text, but returns None instead of raising."""
    try:
        return parse_lead_from_text(text, subject)
    except LeadParseError:
        return None


def get_all_recognizers() -> List[Recognizer]:
    return list(RECOGNIZERS)
