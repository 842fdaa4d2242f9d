"""Agent model - team members who receive lead assignments."""

from uuid import uuid4

from sqlalchemy import Boolean, Column, Index, Integer, Text, Uuid
from sqlalchemy.orm import relationship

from .base import Base, UTCDateTime, utcnow


class Agent(Base):
    """Agent (roster entry) eligible for round-robin lead assignment.

    Only active agents take part in selection. assigned_count and
    last_assigned_at are always written together by the selector's
    compare-and-swap update.
    """
    __tablename__ = "agent"
    __table_args__ = (
        Index("idx_agent_active_last_assigned", "is_active", "last_assigned_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    phone = Column(Text, nullable=True)
    booking_url = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Round-robin bookkeeping
    assigned_count = Column(Integer, nullable=False, default=0)
    last_assigned_at = Column(UTCDateTime, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    leads = relationship("Lead", back_populates="assigned_agent")

    def __repr__(self):
        return (
            f"<Agent(id={self.id}, name={self.name}, email={self.email}, "
            f"active={self.is_active}, assigned_count={self.assigned_count})>"
        )
