"""Text normalizers and field extractors for lead parsing.

Pure functions turning raw email text into normalized emails, phone numbers
and names. The email check is deliberately simple: it avoids false
positives rather than attempting RFC 5322 coverage.
"""

import html
import re
from typing import List

EMAIL_VALID_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
EMAIL_SCAN_PATTERN = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')

# US grouped numbers first, then bare 10-11 digit runs
PHONE_SCAN_PATTERNS = [
    re.compile(r'\+?1?[-.\s]?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}'),
    re.compile(r'\b[0-9]{10,11}\b'),
]

PHONE_MIN_DIGITS = 7
PHONE_MAX_DIGITS = 15


def normalize_email(email: str) -> str:
    """Trim and lower-case an email address."""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    """Check an address has the local@domain.tld shape.

    Example:
        >>> is_valid_email("John@Example.com")
        True
        >>> is_valid_email("john@localhost")
        False
    """
    if not email:
        return False
    return EMAIL_VALID_PATTERN.match(normalize_email(email)) is not None


def extract_emails(text: str) -> List[str]:
    """Return every email-shaped substring, lower-cased, de-duplicated in order."""
    matches = EMAIL_SCAN_PATTERN.findall(text or "")
    return list(dict.fromkeys(m.lower() for m in matches))


def normalize_phone(phone: str) -> str:
    """Strip everything but digits, keeping a leading + for international numbers."""
    has_plus = phone.strip().startswith("+")
    digits = re.sub(r'\D', '', phone)
    return f"+{digits}" if has_plus else digits


def is_valid_phone(phone: str) -> bool:
    """Valid phone numbers have between 7 and 15 digits."""
    digits_only = normalize_phone(phone).lstrip("+")
    return PHONE_MIN_DIGITS <= len(digits_only) <= PHONE_MAX_DIGITS


def format_phone(phone: str) -> str:
    """Format a phone number for display.

    US numbers (10 digits, or 11 digits with a leading 1) get the
    (XXX) XXX-XXXX layout; anything else is returned normalized.

    Example:
        >>> format_phone("555.123.4567")
        '(555) 123-4567'
    """
    normalized = normalize_phone(phone)
    digits_only = normalized.lstrip("+")

    if len(digits_only) == 10:
        return f"({digits_only[:3]}) {digits_only[3:6]}-{digits_only[6:]}"

    if len(digits_only) == 11 and digits_only.startswith("1"):
        return f"+1 ({digits_only[1:4]}) {digits_only[4:7]}-{digits_only[7:]}"

    return normalized


def extract_phones(text: str) -> List[str]:
    """Scan text for phone numbers; normalized, validated and de-duplicated."""
    found = []
    for pattern in PHONE_SCAN_PATTERNS:
        found.extend(pattern.findall(text or ""))

    normalized = [normalize_phone(p) for p in found]
    return list(dict.fromkeys(p for p in normalized if is_valid_phone(p)))


def normalize_name(name: str) -> str:
    """Capitalize the first letter of each whitespace-separated word."""
    words = name.strip().lower().split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def normalize_whitespace(text: str) -> str:
    """Unify line endings, collapse spaces and runs of blank lines."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace("\t", " ")
    text = re.sub(r' +', ' ', text)
    text = re.sub(r'\n{3,}', '\n\n', text)
    return text.strip()


def strip_html_tags(markup: str) -> str:
    """Reduce an HTML body to plain text for parsing.

    Used only when a message has no text/plain part. Line breaks and block
    closings become newlines so labeled "Name: value" lines survive.
    """
    text = re.sub(r'<style[^>]*>[\s\S]*?</style>', '', markup, flags=re.IGNORECASE)
    text = re.sub(r'<script[^>]*>[\s\S]*?</script>', '', text, flags=re.IGNORECASE)
    text = re.sub(r'\s*\n\s*', ' ', text)
    text = re.sub(r'<br\s*/?>|</(?:p|div|tr|li|h[1-6])>', '\n', text, flags=re.IGNORECASE)
    text = re.sub(r'<[^>]+>', ' ', text)
    text = html.unescape(text).replace('\xa0', ' ')
    text = re.sub(r'[ \t]*\n[ \t]*', '\n', text)
    return normalize_whitespace(text)
