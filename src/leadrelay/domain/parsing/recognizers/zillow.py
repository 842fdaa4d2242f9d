"""Zillow lead email recognizer.

Zillow notifications mention Zillow in the subject ("New lead from Zillow")
and carry labeled Name:/Email:/Phone: lines in the body.
"""

import re
from typing import Optional

from ..models import LeadCandidate, LeadSource
from .common import (
    EMAIL_VALUE,
    NAME_VALUE,
    PHONE_VALUE,
    labeled_email,
    labeled_phone,
    lead_emails,
    mentions_any,
    search_first,
    split_name,
)

OWN_DOMAINS = ("zillow", "zillowgroup")

NAME_PATTERNS = [
    re.compile(r'(?:Name|Contact|Buyer|Seller):[ \t]*' + NAME_VALUE, re.IGNORECASE),
    re.compile(r'(?:^|\n)([A-Z][a-z]+[ \t]+[A-Z][a-z]+)[ \t]+(?i:is interested|has requested)'),
]
EMAIL_PATTERNS = [
    re.compile(r'(?:Email|E-mail|Contact Email):\s*' + EMAIL_VALUE, re.IGNORECASE),
]
PHONE_PATTERNS = [
    re.compile(r'(?:Phone|Mobile|Cell|Tel):[ \t]*' + PHONE_VALUE, re.IGNORECASE),
]
ADDRESS_PATTERN = re.compile(r'(?:Property|Address|Listing):[ \t]*(.+?)(?:\n|$)', re.IGNORECASE)


def parse_zillow_lead(text: str, subject: str) -> Optional[LeadCandidate]:
    if not (mentions_any(subject, ("zillow",)) or mentions_any(text, ("zillow.com", "from zillow"))):
        return None

    raw_data = {}
    first_name = last_name = None

    name_match = search_first(NAME_PATTERNS, text)
    if name_match:
        first_name, last_name, raw_data["full_name"] = split_name(name_match.group(1))

    email = labeled_email(EMAIL_PATTERNS, text)
    if not email:
        candidates = lead_emails(text, OWN_DOMAINS)
        email = candidates[0] if candidates else None

    if not email:
        return None

    address_match = ADDRESS_PATTERN.search(text)
    if address_match:
        raw_data["property_address"] = address_match.group(1).strip()

    return LeadCandidate(
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone=labeled_phone(PHONE_PATTERNS, text),
        source=LeadSource.ZILLOW,
        raw_data=raw_data,
    )
