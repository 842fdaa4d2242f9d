"""Facebook Lead Ads email recognizer.

Lead Ads notifications dump the form fields one per line, e.g.

    full_name: John Smith
    email: john@example.com
    phone_number: 555-123-4567
"""

import re
from typing import Optional

from ..models import LeadCandidate, LeadSource
from ..validators import normalize_name
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

OWN_DOMAINS = ("facebook", "fb.com", "facebookmail")

NAME_PATTERNS = [
    re.compile(
        r'(?:full_name|name|first_name[ \t]*(?:&|and)?[ \t]*last_name):[ \t]*' + NAME_VALUE,
        re.IGNORECASE,
    ),
    re.compile(r'first_name:[ \t]*([A-Za-z]+)', re.IGNORECASE),
]
LAST_NAME_PATTERN = re.compile(r'last_name:[ \t]*([A-Za-z]+)', re.IGNORECASE)
EMAIL_PATTERNS = [
    re.compile(r'(?:email|e-mail|email_address):\s*' + EMAIL_VALUE, re.IGNORECASE),
]
PHONE_PATTERNS = [
    re.compile(r'(?:phone|phone_number|mobile|cell):[ \t]*' + PHONE_VALUE, re.IGNORECASE),
]
FORM_FIELD_PATTERN = re.compile(r'^[ \t]*(\w+):[ \t]*(.+)$', re.MULTILINE)

CONTACT_FIELDS = {"email", "phone", "name", "full_name", "first_name", "last_name"}


def parse_facebook_lead(text: str, subject: str) -> Optional[LeadCandidate]:
    signature = (
        mentions_any(subject, ("facebook", "new lead from"))
        or mentions_any(text, ("facebook.com", "fb.com", "lead ad"))
    )
    if not signature:
        return None

    raw_data = {}
    first_name = last_name = None

    name_match = search_first(NAME_PATTERNS, text)
    if name_match:
        first_name, last_name, raw_data["full_name"] = split_name(name_match.group(1))

    if not last_name:
        last_name_match = LAST_NAME_PATTERN.search(text)
        if last_name_match:
            last_name = normalize_name(last_name_match.group(1))

    email = labeled_email(EMAIL_PATTERNS, text)
    if not email:
        candidates = lead_emails(text, OWN_DOMAINS)
        email = candidates[0] if candidates else None

    if not email:
        return None

    for key, value in FORM_FIELD_PATTERN.findall(text):
        key = key.lower()
        if key not in CONTACT_FIELDS:
            raw_data[key] = value.strip()

    return LeadCandidate(
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone=labeled_phone(PHONE_PATTERNS, text),
        source=LeadSource.FACEBOOK,
        raw_data=raw_data,
    )
