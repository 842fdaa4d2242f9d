"""Shared field-extraction helpers for the source recognizers."""

import re
from typing import Iterable, List, Optional, Pattern, Tuple

from ..validators import (
    extract_emails,
    extract_phones,
    is_valid_email,
    is_valid_phone,
    normalize_email,
    normalize_name,
    normalize_phone,
)

# Addresses that never belong to a lead
GENERIC_MAILER_FRAGMENTS = (
    "noreply",
    "no-reply",
    "donotreply",
    "mailer-daemon",
    "postmaster",
)

# A one- or two-word name on the same line as its label
NAME_VALUE = r'([A-Za-z]+(?:[ \t]+[A-Za-z]+)?)'
EMAIL_VALUE = r'([^\s@]+@[^\s@]+\.[^\s@]+)'
PHONE_VALUE = r'([\d \t\-().+]+)'


def search_first(patterns: Iterable[Pattern], text: str) -> Optional[re.Match]:
    """Return the match of the first pattern that matches, in list order."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def split_name(raw_name: str) -> Tuple[str, Optional[str], str]:
    """Normalize a full name and split it into (first, last, full)."""
    full_name = normalize_name(raw_name)
    parts = full_name.split()
    first_name = parts[0]
    last_name = " ".join(parts[1:]) or None
    return first_name, last_name, full_name


def labeled_email(patterns: Iterable[Pattern], text: str) -> Optional[str]:
    """First labeled email whose value passes validation."""
    for pattern in patterns:
        match = pattern.search(text)
        if match and is_valid_email(match.group(1)):
            return normalize_email(match.group(1))
    return None


def lead_emails(text: str, excluded_fragments: Iterable[str] = ()) -> List[str]:
    """Extracted addresses minus the sender's own domains and mailer addresses."""
    excluded = tuple(excluded_fragments) + GENERIC_MAILER_FRAGMENTS
    return [
        email for email in extract_emails(text)
        if not any(fragment in email for fragment in excluded)
    ]


def labeled_phone(patterns: Iterable[Pattern], text: str) -> Optional[str]:
    """First labeled phone, normalized; falls back to any phone in the text."""
    match = search_first(patterns, text)
    if match:
        phone = normalize_phone(match.group(1))
        if is_valid_phone(phone):
            return phone

    phones = extract_phones(text)
    return phones[0] if phones else None


def mentions_any(haystack: str, needles: Iterable[str]) -> bool:
    """Case-insensitive substring signature test."""
    lowered = haystack.lower()
    return any(needle in lowered for needle in needles)
