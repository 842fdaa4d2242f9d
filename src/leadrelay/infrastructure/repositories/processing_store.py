"""SQL store for processing records (dead-letter / retry bookkeeping)."""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ...database import session_scope
from ...domain.processing.ports import ProcessingRecord, ProcessingStorePort
from ...domain.processing.status import InvalidTransitionError, ProcessingStatus, can_transition
from ...models import ProcessedMessage

logger = logging.getLogger(__name__)


def _to_record(row: ProcessedMessage) -> ProcessingRecord:
    return ProcessingRecord(
        message_id=row.message_id,
        status=ProcessingStatus(row.status),
        attempts=row.attempts,
        last_attempt_at=row.last_attempt_at,
        error_log=row.error_log,
        processed_at=row.processed_at,
        updated_at=row.updated_at,
    )


class SqlProcessingStore(ProcessingStorePort):
    """processed_message table access. Every method commits before returning."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _load(self, session: Session, message_id: str) -> Optional[ProcessedMessage]:
        return session.execute(
            select(ProcessedMessage)
            .where(ProcessedMessage.message_id == message_id)
            .with_for_update()
        ).scalar_one_or_none()

    def _transition(self, row: ProcessedMessage, to_status: ProcessingStatus, replay: bool = False) -> None:
        current = ProcessingStatus(row.status)
        if not can_transition(current, to_status, replay=replay):
            raise InvalidTransitionError(row.message_id, current, to_status)
        row.status = to_status.value

    def get(self, message_id: str) -> Optional[ProcessingRecord]:
        with session_scope(self.session_factory) as session:
            row = session.execute(
                select(ProcessedMessage).where(ProcessedMessage.message_id == message_id)
            ).scalar_one_or_none()
            return _to_record(row) if row else None

    def begin_attempt(self, message_id: str, now: datetime, replay: bool = False) -> ProcessingRecord:
        # A concurrent first insert loses on the unique message_id; the retry
        # then takes the update path.
        for attempt in range(2):
            try:
                with session_scope(self.session_factory) as session:
                    row = self._load(session, message_id)
                    if row is None:
                        row = ProcessedMessage(
                            message_id=message_id,
                            attempts=1,
                            last_attempt_at=now,
                            status=ProcessingStatus.PROCESSING.value,
                            error_log=None,
                            processed_at=now,
                        )
                        session.add(row)
                    else:
                        self._transition(row, ProcessingStatus.PROCESSING, replay=replay)
                        row.attempts += 1
                        row.last_attempt_at = now
                        row.error_log = None
                    session.flush()
                    return _to_record(row)
            except IntegrityError:
                if attempt:
                    raise
                logger.info(f"Processing record for {message_id} created concurrently, retrying")

    def mark_success(self, message_id: str, now: datetime) -> None:
        with session_scope(self.session_factory) as session:
            row = self._load(session, message_id)
            if row is None:
                raise InvalidTransitionError(message_id, None, ProcessingStatus.SUCCESS)
            self._transition(row, ProcessingStatus.SUCCESS)
            row.error_log = None
            row.updated_at = now

    def mark_failed(self, message_id: str, error: str, now: datetime) -> None:
        with session_scope(self.session_factory) as session:
            row = self._load(session, message_id)
            if row is None:
                raise InvalidTransitionError(message_id, None, ProcessingStatus.FAILED)
            self._transition(row, ProcessingStatus.FAILED)
            row.error_log = error
            row.updated_at = now

    def successful_ids(self, message_ids: Iterable[str]) -> Set[str]:
        ids = list(message_ids)
        if not ids:
            return set()
        with session_scope(self.session_factory) as session:
            rows = session.execute(
                select(ProcessedMessage.message_id).where(
                    ProcessedMessage.message_id.in_(ids),
                    ProcessedMessage.status == ProcessingStatus.SUCCESS.value,
                )
            ).scalars().all()
            return set(rows)

    def list_retryable(self, max_attempts: int, limit: int) -> List[ProcessingRecord]:
        with session_scope(self.session_factory) as session:
            rows = session.execute(
                select(ProcessedMessage)
                .where(
                    ProcessedMessage.status == ProcessingStatus.FAILED.value,
                    ProcessedMessage.attempts < max_attempts,
                )
                .order_by(ProcessedMessage.last_attempt_at.asc(), ProcessedMessage.message_id)
                .limit(limit)
            ).scalars().all()
            return [_to_record(r) for r in rows]

    def list_failed(self, limit: int) -> List[ProcessingRecord]:
        with session_scope(self.session_factory) as session:
            rows = session.execute(
                select(ProcessedMessage)
                .where(ProcessedMessage.status == ProcessingStatus.FAILED.value)
                .order_by(ProcessedMessage.last_attempt_at.desc(), ProcessedMessage.message_id)
                .limit(limit)
            ).scalars().all()
            return [_to_record(r) for r in rows]

    def count_by_status(self, since: Optional[datetime] = None) -> Dict[str, int]:
        query = select(ProcessedMessage.status, func.count()).group_by(ProcessedMessage.status)
        if since is not None:
            query = query.where(ProcessedMessage.processed_at >= since)

        counts = {status.value: 0 for status in ProcessingStatus}
        with session_scope(self.session_factory) as session:
            for status, count in session.execute(query).all():
                counts[status] = count
        return counts

    def purge_successful_before(self, cutoff: datetime) -> int:
        with session_scope(self.session_factory) as session:
            result = session.execute(
                delete(ProcessedMessage)
                .where(
                    ProcessedMessage.status == ProcessingStatus.SUCCESS.value,
                    ProcessedMessage.processed_at < cutoff,
                )
                .execution_options(synchronize_session=False)
            )
            return result.rowcount
