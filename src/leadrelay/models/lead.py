"""Lead model - a prospective contact distilled from inbound emails."""

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import relationship, validates

from .base import Base, PortableJSONB, UTCDateTime, utcnow

LEAD_SOURCES = ("zillow", "realtor", "facebook", "generic", "unknown")


class Lead(Base):
    """Lead keyed by lower-cased email.

    Re-processing a message for an already-known email merges into this row
    instead of creating a duplicate. reply_sent_at stays NULL until the
    acknowledgment email has actually been sent, which is what makes reply
    dispatch idempotent across retries and manual replays.
    """
    __tablename__ = "lead"
    __table_args__ = (
        CheckConstraint(
            "source IN ('zillow', 'realtor', 'facebook', 'generic', 'unknown')",
            name="ck_lead_source",
        ),
        Index("idx_lead_created_at", "created_at"),
        Index("idx_lead_assigned_agent", "assigned_agent_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    email = Column(Text, nullable=False, unique=True)
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    source = Column(Text, nullable=False, default="unknown")
    source_message = Column(Text, nullable=True)
    raw_data = Column(PortableJSONB, nullable=True)

    assigned_agent_id = Column(Uuid, ForeignKey("agent.id", ondelete="SET NULL"), nullable=True)
    assigned_at = Column(UTCDateTime, nullable=True)
    reply_sent_at = Column(UTCDateTime, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    assigned_agent = relationship("Agent", back_populates="leads")

    @validates("email")
    def normalize_email(self, key, value):
        """Store emails lower-cased and trimmed."""
        return value.strip().lower() if value else value

    @validates("source")
    def validate_source(self, key, value):
        """Ensure source is a known lead source."""
        if value not in LEAD_SOURCES:
            raise ValueError(f"Invalid lead source: {value}. Must be one of {LEAD_SOURCES}")
        return value

    def __repr__(self):
        return f"<Lead(id={self.id}, email={self.email}, source={self.source})>"
