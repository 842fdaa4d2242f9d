"""Base exception for Lead Relay.

Concrete errors live next to the code that raises them and subclass
LeadRelayError so callers can catch the whole family at a process boundary.
"""


class LeadRelayError(Exception):
    """Base class for all Lead Relay errors."""
