"""SystemLock model - named, TTL-boxed mutual exclusion token."""

from sqlalchemy import Column, Text

from .base import Base, UTCDateTime, utcnow


class SystemLock(Base):
    """A lock is held iff expires_at is in the future.

    Releasing sets expires_at in the past and clears locked_by; the row
    itself is kept so later acquires are a conditional UPDATE.
    """
    __tablename__ = "system_lock"

    name = Column(Text, primary_key=True)
    locked_by = Column(Text, nullable=True)
    expires_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<SystemLock(name={self.name}, locked_by={self.locked_by}, expires_at={self.expires_at})>"
