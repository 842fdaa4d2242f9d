"""Fallback recognizer for messages no source-specific recognizer claims.

Heuristic only: any message carrying a non-system email address yields a
candidate. It must stay last in the chain.
"""

import re
from typing import Optional

from ..models import LeadCandidate, LeadSource
from ..validators import extract_phones, normalize_name
from .common import NAME_VALUE, lead_emails, search_first, split_name

LABELED_NAME_PATTERNS = [
    re.compile(r'(?:^|\n)[ \t]*(?:Full Name|Name|Contact|From|Sender):[ \t]*' + NAME_VALUE, re.IGNORECASE),
    re.compile(r'(?:First Name|FirstName):[ \t]*([A-Za-z]+)', re.IGNORECASE),
]
GREETING_PATTERNS = [
    re.compile(r"(?i:hi|hello|hey),?[ \t]+(?i:i'm|i am|this is)[ \t]+([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)?)"),
    re.compile(r"(?i:my name is|i'm|i am)[ \t]+([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)?)"),
]
LOCAL_PART_SEPARATORS = re.compile(r'[._-]')
KEY_VALUE_PATTERN = re.compile(r'^([A-Za-z][A-Za-z \t]*):[ \t]*(.+)$', re.MULTILINE)


def _name_from_local_part(email: str):
    """john.smith@example.com -> ("John", "Smith")."""
    local_part = email.split("@")[0]
    tokens = [
        token for token in LOCAL_PART_SEPARATORS.split(local_part)
        if len(token) > 1 and token.isascii() and token.isalpha()
    ]
    if not tokens:
        return None, None
    last_name = normalize_name(tokens[1]) if len(tokens) > 1 else None
    return normalize_name(tokens[0]), last_name


def parse_generic_lead(text: str, subject: str) -> Optional[LeadCandidate]:
    candidates = lead_emails(text)
    if not candidates:
        return None

    email = candidates[0]
    raw_data = {}
    first_name = last_name = None

    labeled = search_first(LABELED_NAME_PATTERNS, text)
    if labeled:
        first_name, last_name, raw_data["full_name"] = split_name(labeled.group(1))

    if not first_name:
        first_name, last_name = _name_from_local_part(email)

    if not first_name:
        greeting = search_first(GREETING_PATTERNS, text)
        if greeting:
            first_name, last_name, _ = split_name(greeting.group(1))

    phones = extract_phones(text)

    for key, value in KEY_VALUE_PATTERN.findall(text):
        key = re.sub(r'\s+', '_', key.strip().lower())
        value = value.strip()
        if value and key not in raw_data:
            raw_data[key] = value

    if subject:
        raw_data["subject"] = subject

    return LeadCandidate(
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone=phones[0] if phones else None,
        source=LeadSource.GENERIC,
        raw_data=raw_data,
    )
