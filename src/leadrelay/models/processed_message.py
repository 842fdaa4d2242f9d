"""ProcessedMessage model - dead-letter / retry bookkeeping per inbound message."""

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, Index, Integer, Text, Uuid

from .base import Base, UTCDateTime, utcnow


class ProcessedMessage(Base):
    """Processing record for one mailbox message id.

    Written with status PROCESSING before any extraction work starts, so a
    crash mid-processing leaves a durable marker with an accurate attempt
    count. FAILED rows are the dead-letter queue: they stay visible until
    they succeed or exhaust the retry ceiling.
    """
    __tablename__ = "processed_message"
    __table_args__ = (
        CheckConstraint(
            "status IN ('PROCESSING', 'SUCCESS', 'FAILED')",
            name="ck_processed_message_status",
        ),
        Index("idx_processed_message_status_attempt", "status", "last_attempt_at"),
        Index("idx_processed_message_processed_at", "processed_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    message_id = Column(Text, nullable=False, unique=True)
    attempts = Column(Integer, nullable=False, default=0)
    last_attempt_at = Column(UTCDateTime, nullable=True)
    status = Column(Text, nullable=False, default="PROCESSING")
    error_log = Column(Text, nullable=True)

    processed_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return (
            f"<ProcessedMessage(message_id={self.message_id}, status={self.status}, "
            f"attempts={self.attempts})>"
        )
