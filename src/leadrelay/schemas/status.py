"""Pydantic schemas for the status API"""

from typing import List, Optional

from pydantic import BaseModel


class ProcessingStats(BaseModel):
    processing: int
    success: int
    failed: int
    total: int


class MessageCounts(BaseModel):
    total: int
    success: int
    failed: int
    success_rate: str


class FailedMessage(BaseModel):
    message_id: str
    attempts: int
    last_attempt_at: Optional[str] = None
    error: str


class AgentAssignment(BaseModel):
    id: str
    name: str
    email: str
    is_active: bool
    assigned_count: int
    last_assigned_at: Optional[str] = None


class StatusResponse(BaseModel):
    """GET /status"""
    lock_held: bool
    processing: ProcessingStats
    last_24h: MessageCounts
    leads_created_24h: int
    agents: List[AgentAssignment]
    recent_failures: List[FailedMessage]


class ReplayResponse(BaseModel):
    """POST /messages/{message_id}/replay"""
    message_id: str
    success: bool
    attempts: int
    lead_id: Optional[str] = None
    recipient_name: Optional[str] = None
    error: Optional[str] = None
    skipped: bool = False
