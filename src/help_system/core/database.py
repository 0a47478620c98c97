"""Database connection and session management.

This module handles the database connection using SQLAlchemy. A ``Store`` owns
one engine and its session factory and is passed explicitly to whoever needs
it; there is no module-level connection.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from help_system.config import DATABASE_URL
from help_system.core.exceptions import BackendUnavailableError, DuplicateKeyError
from help_system.models.base import Base
# Import models to ensure they are registered with Base.metadata
import help_system.models  # noqa: F401

logger = logging.getLogger(__name__)


class Store:
    """Process-wide record store with an init -> serve -> teardown lifecycle."""

    def __init__(self, url: str = DATABASE_URL):
        self.url = url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def init(self) -> "Store":
        """Create the engine and any missing tables.

        Returns:
            The store itself, for chaining.
        """
        if self._engine is not None:
            return self

        url = make_url(self.url)
        kwargs = {}
        if url.get_backend_name() == "sqlite":
            kwargs["connect_args"] = {"check_same_thread": False}
            if url.database in (None, "", ":memory:"):
                # One shared connection, otherwise every checkout sees an empty db
                kwargs["poolclass"] = StaticPool
            else:
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        try:
            engine = create_engine(self.url, **kwargs)
            Base.metadata.create_all(bind=engine)
        except OperationalError as e:
            raise BackendUnavailableError(f"Cannot open database: {e}") from e

        self._engine = engine
        self._session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=engine
        )
        logger.info("Store initialized: %s", url.render_as_string(hide_password=True))
        return self

    def teardown(self) -> None:
        """Dispose of the engine. The store cannot be used afterwards."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Store torn down")

    def new_session(self) -> Session:
        if self._session_factory is None:
            raise BackendUnavailableError("Store is not initialized")
        return self._session_factory()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Provide a session that is closed on exit."""
        db = self.new_session()
        try:
            yield db
        finally:
            db.close()

    def get_db(self) -> Iterator[Session]:
        """Dependency for getting a database session."""
        with self.session() as db:
            yield db


def commit(db: Session) -> None:
    """Commit the session, translating backend failures into error kinds.

    Args:
        db: Session with pending changes.

    Raises:
        DuplicateKeyError: On a primary key or unique constraint collision.
        BackendUnavailableError: If the database cannot be reached.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateKeyError(str(e.orig)) from e
    except (OperationalError, DBAPIError) as e:
        db.rollback()
        raise BackendUnavailableError(str(e)) from e
