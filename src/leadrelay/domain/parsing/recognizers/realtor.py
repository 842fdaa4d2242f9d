"""Realtor.com lead email recognizer.

Realtor.com (operated by Move, Inc.) sends "New Lead from Realtor.com"
notifications with contact details and the listing the lead asked about.
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

OWN_DOMAINS = ("realtor.com", "move.com")

NAME_PATTERNS = [
    re.compile(r'(?:Lead Name|Name|Contact):[ \t]*' + NAME_VALUE, re.IGNORECASE),
    re.compile(r'([A-Z][a-z]+[ \t]+[A-Z][a-z]+)[ \t]+(?i:is interested in|wants more info)'),
    re.compile(r'(?i:from)[ \t]+([A-Z][a-z]+[ \t]+[A-Z][a-z]+)'),
]
EMAIL_PATTERNS = [
    re.compile(r'(?:Email|E-mail):\s*' + EMAIL_VALUE, re.IGNORECASE),
    re.compile(r'(?:Contact|Reply to):\s*' + EMAIL_VALUE, re.IGNORECASE),
]
PHONE_PATTERNS = [
    re.compile(r'(?:Phone|Mobile|Cell|Tel(?:ephone)?):[ \t]*' + PHONE_VALUE, re.IGNORECASE),
]
PROPERTY_PATTERN = re.compile(r'(?:Property|Listing|Address):[ \t]*(.+?)(?:\n|$)', re.IGNORECASE)
PRICE_PATTERN = re.compile(r'\$[\d,]+(?:\.\d{2})?')


def parse_realtor_lead(text: str, subject: str) -> Optional[LeadCandidate]:
    signature = (
        mentions_any(subject, ("realtor.com", "realtor lead"))
        or mentions_any(text, ("realtor.com", "move.com"))
    )
    if not signature:
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

    property_match = PROPERTY_PATTERN.search(text)
    if property_match:
        raw_data["property_address"] = property_match.group(1).strip()

    price_match = PRICE_PATTERN.search(text)
    if price_match:
        raw_data["price"] = price_match.group(0)

    return LeadCandidate(
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone=labeled_phone(PHONE_PATTERNS, text),
        source=LeadSource.REALTOR,
        raw_data=raw_data,
    )
