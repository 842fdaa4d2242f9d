"""Source-specific lead recognizers."""

from .facebook import parse_facebook_lead
from .generic import parse_generic_lead
from .realtor import parse_realtor_lead
from .zillow import parse_zillow_lead

__all__ = [
    "parse_zillow_lead",
    "parse_realtor_lead",
    "parse_facebook_lead",
    "parse_generic_lead",
]
