"""SQL roster store for round-robin assignment."""

from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import sessionmaker

from ...database import session_scope
from ...domain.assignment.ports import Recipient, RosterStorePort
from ...models import Agent


def _to_recipient(agent: Agent) -> Recipient:
    return Recipient(
        id=agent.id,
        name=agent.name,
        email=agent.email,
        phone=agent.phone,
        booking_url=agent.booking_url,
        is_active=agent.is_active,
        assigned_count=agent.assigned_count,
        last_assigned_at=agent.last_assigned_at,
    )


class SqlRosterStore(RosterStorePort):
    """Agents table as the roster.

    The compare-and-swap in mark_assigned uses assigned_count as the row
    version: count and timestamp are only ever written together, so an
    unchanged count means an unchanged timestamp.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def list_active(self) -> List[Recipient]:
        with session_scope(self.session_factory) as session:
            agents = session.execute(
                select(Agent).where(Agent.is_active.is_(True)).order_by(Agent.name)
            ).scalars().all()
            return [_to_recipient(a) for a in agents]

    def list_all(self) -> List[Recipient]:
        with session_scope(self.session_factory) as session:
            agents = session.execute(select(Agent).order_by(Agent.name)).scalars().all()
            return [_to_recipient(a) for a in agents]

    def get(self, recipient_id: UUID) -> Optional[Recipient]:
        with session_scope(self.session_factory) as session:
            agent = session.get(Agent, recipient_id)
            return _to_recipient(agent) if agent else None

    def mark_assigned(self, recipient: Recipient, now: datetime) -> bool:
        with session_scope(self.session_factory) as session:
            result = session.execute(
                update(Agent)
                .where(
                    Agent.id == recipient.id,
                    Agent.is_active.is_(True),
                    Agent.assigned_count == recipient.assigned_count,
                )
                .values(assigned_count=Agent.assigned_count + 1, last_assigned_at=now)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def add_agent(
        self,
        name: str,
        email: str,
        phone: Optional[str] = None,
        booking_url: Optional[str] = None,
        is_active: bool = True,
    ) -> Tuple[Recipient, bool]:
        """Create an agent unless one with the same email exists.

        Returns:
            (recipient, created); an existing agent is returned unchanged
        """
        email = email.strip().lower()
        with session_scope(self.session_factory) as session:
            agent = session.execute(select(Agent).where(Agent.email == email)).scalar_one_or_none()
            if agent is not None:
                return _to_recipient(agent), False

            agent = Agent(
                name=name,
                email=email,
                phone=phone,
                booking_url=booking_url,
                is_active=is_active,
                assigned_count=0,
            )
            session.add(agent)
            session.flush()
            return _to_recipient(agent), True
