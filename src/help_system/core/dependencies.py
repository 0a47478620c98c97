"""Dependency injection module for FastAPI.

The Store and codec live on ``app.state``; each request gets its own session
and a HelpService bound to it.
"""

from typing import Annotated, Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from help_system.utils.help_service import HelpService


def get_db(request: Request) -> Iterator[Session]:
    """Get a request-scoped database session."""
    yield from request.app.state.store.get_db()


def get_help_service(
    request: Request, db: Session = Depends(get_db)
) -> HelpService:
    """Get HelpService instance with request-scoped DB session.

    Args:
        request: Incoming request, used to reach the app's codec.
        db: Database session.

    Returns:
        HelpService instance.
    """
    return HelpService(db, codec=request.app.state.codec)


# Type aliases for dependency injection
HelpServiceDep = Annotated[HelpService, Depends(get_help_service)]
