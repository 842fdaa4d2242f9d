"""SQL lock store backing the run lock."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from ...database import session_scope
from ...domain.locking.ports import LockRecord, LockStorePort
from ...models import SystemLock

logger = logging.getLogger(__name__)


class SqlLockStore(LockStorePort):
    """Lock rows in the system_lock table.

    Acquire is a conditional UPDATE on an expired row, falling back to an
    INSERT for a lock name seen for the first time. The primary key on name
    turns a concurrent first insert into an IntegrityError, which means the
    other writer won.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def try_acquire(self, name: str, holder_id: str, now: datetime, expires_at: datetime) -> bool:
        try:
            with session_scope(self.session_factory) as session:
                result = session.execute(
                    update(SystemLock)
                    .where(SystemLock.name == name, SystemLock.expires_at <= now)
                    .values(locked_by=holder_id, expires_at=expires_at, updated_at=now)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 1:
                    return True

                if session.get(SystemLock, name) is not None:
                    return False

                session.add(SystemLock(name=name, locked_by=holder_id, expires_at=expires_at))
                session.flush()
                return True
        except IntegrityError:
            logger.info(f"Lock '{name}' was created concurrently by another worker")
            return False

    def release(self, name: str, released_at: datetime) -> None:
        with session_scope(self.session_factory) as session:
            result = session.execute(
                update(SystemLock)
                .where(SystemLock.name == name)
                .values(locked_by=None, expires_at=released_at)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                logger.debug(f"Lock '{name}' does not exist, nothing to release")

    def extend(self, name: str, holder_id: str, expires_at: datetime) -> bool:
        with session_scope(self.session_factory) as session:
            result = session.execute(
                update(SystemLock)
                .where(SystemLock.name == name, SystemLock.locked_by == holder_id)
                .values(expires_at=expires_at)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def get(self, name: str) -> Optional[LockRecord]:
        with session_scope(self.session_factory) as session:
            row = session.execute(
                select(SystemLock).where(SystemLock.name == name)
            ).scalar_one_or_none()
            if row is None:
                return None
            return LockRecord(name=row.name, locked_by=row.locked_by, expires_at=row.expires_at)
