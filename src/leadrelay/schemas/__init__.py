"""Pydantic Schemas for Lead Relay"""

from .agent import AgentSeed, AgentSeedFile
from .status import (
    AgentAssignment,
    FailedMessage,
    MessageCounts,
    ProcessingStats,
    ReplayResponse,
    StatusResponse,
)

__all__ = [
    # Seeding
    "AgentSeed",
    "AgentSeedFile",
    # Status API
    "AgentAssignment",
    "FailedMessage",
    "MessageCounts",
    "ProcessingStats",
    "ReplayResponse",
    "StatusResponse",
]
