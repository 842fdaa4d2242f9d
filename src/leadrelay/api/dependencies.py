"""FastAPI dependencies for the status API.

Services are built once per process and kept on app.state.
"""

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from ..workers.bootstrap import LeadRelayServices


def get_services(request: Request) -> LeadRelayServices:
    return request.app.state.services


def get_db(request: Request) -> Generator[Session, None, None]:
    """Database session dependency, closed after the request."""
    session = get_services(request).session_factory()
    try:
        yield session
    finally:
        session.close()
