"""Lead parsing: normalizers, field extractors and the recognizer chain."""

from .chain import (
    RECOGNIZERS,
    EmptyMessageError,
    LeadParseError,
    get_all_recognizers,
    parse_lead_from_text,
    try_parse_lead_from_text,
)
from .models import LeadCandidate, LeadSource, Recognizer
from .recognizers import (
    parse_facebook_lead,
    parse_generic_lead,
    parse_realtor_lead,
    parse_zillow_lead,
)
from .validators import (
    extract_emails,
    extract_phones,
    format_phone,
    is_valid_email,
    is_valid_phone,
    normalize_email,
    normalize_name,
    normalize_phone,
    normalize_whitespace,
    strip_html_tags,
)

__all__ = [
    "RECOGNIZERS",
    "EmptyMessageError",
    "LeadParseError",
    "LeadCandidate",
    "LeadSource",
    "Recognizer",
    "get_all_recognizers",
    "parse_lead_from_text",
    "try_parse_lead_from_text",
    "parse_zillow_lead",
    "parse_realtor_lead",
    "parse_facebook_lead",
    "parse_generic_lead",
    "extract_emails",
    "extract_phones",
    "format_phone",
    "is_valid_email",
    "is_valid_phone",
    "normalize_email",
    "normalize_name",
    "normalize_phone",
    "normalize_whitespace",
    "strip_html_tags",
]
