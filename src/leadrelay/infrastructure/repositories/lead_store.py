"""SQL store for lead records."""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from ...database import session_scope
from ...domain.processing.ports import LeadRecord, LeadStorePort, LeadUpsert, merge_lead_values
from ...models import Lead

logger = logging.getLogger(__name__)


def _to_record(row: Lead, created: bool = False) -> LeadRecord:
    return LeadRecord(
        id=row.id,
        email=row.email,
        source=row.source,
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone,
        source_message=row.source_message,
        raw_data=dict(row.raw_data or {}),
        assigned_agent_id=row.assigned_agent_id,
        assigned_at=row.assigned_at,
        reply_sent_at=row.reply_sent_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        created=created,
    )


class SqlLeadStore(LeadStorePort):
    """lead table access. The unique email constraint makes upserts atomic per email."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_by_email(self, email: str) -> Optional[LeadRecord]:
        with session_scope(self.session_factory) as session:
            row = session.execute(
                select(Lead).where(Lead.email == email.strip().lower())
            ).scalar_one_or_none()
            return _to_record(row) if row else None

    def upsert(self, incoming: LeadUpsert, now: datetime) -> LeadRecord:
        email = incoming.email.strip().lower()

        for attempt in range(2):
            try:
                with session_scope(self.session_factory) as session:
                    row = session.execute(
                        select(Lead).where(Lead.email == email).with_for_update()
                    ).scalar_one_or_none()

                    if row is None:
                        row = Lead(
                            email=email,
                            first_name=incoming.first_name,
                            last_name=incoming.last_name,
                            phone=incoming.phone,
                            source=incoming.source,
                            source_message=incoming.source_message,
                            raw_data=dict(incoming.raw_data or {}),
                            assigned_agent_id=incoming.assigned_agent_id,
                            assigned_at=incoming.assigned_at,
                            created_at=now,
                            updated_at=now,
                        )
                        session.add(row)
                        session.flush()
                        return _to_record(row, created=True)

                    for column, value in merge_lead_values(_to_record(row), incoming).items():
                        setattr(row, column, value)
                    row.updated_at = now
                    session.flush()
                    return _to_record(row)
            except IntegrityError:
                if attempt:
                    raise
                logger.info(f"Lead {email} inserted concurrently, merging into existing row")

    def mark_reply_sent(self, lead_id: UUID, now: datetime) -> None:
        with session_scope(self.session_factory) as session:
            session.execute(
                update(Lead)
                .where(Lead.id == lead_id)
                .values(reply_sent_at=now, updated_at=now)
                .execution_options(synchronize_session=False)
            )

    def count_created_since(self, since: datetime) -> int:
        with session_scope(self.session_factory) as session:
            return session.execute(
                select(func.count()).select_from(Lead).where(Lead.created_at >= since)
            ).scalar_one()

    def list_recent(self, limit: int) -> List[LeadRecord]:
        with session_scope(self.session_factory) as session:
            rows = session.execute(
                select(Lead).order_by(Lead.created_at.desc()).limit(limit)
            ).scalars().all()
            return [_to_record(r) for r in rows]
