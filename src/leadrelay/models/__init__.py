"""SQLAlchemy Models for Lead Relay"""

from .base import Base, PortableJSONB, UTCDateTime
from .agent import Agent
from .lead import Lead, LEAD_SOURCES
from .processed_message import ProcessedMessage
from .system_lock import SystemLock

__all__ = [
    "Base",
    "PortableJSONB",
    "UTCDateTime",
    "Agent",
    "Lead",
    "LEAD_SOURCES",
    "ProcessedMessage",
    "SystemLock",
]
