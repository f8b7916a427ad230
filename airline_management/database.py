"""Database helpers for the airline management console."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DEFAULT_DB_URL
from .models import Base
from .sequences import ensure_sequences

logger = logging.getLogger(__name__)


def create_session_factory(
    db_url: str = DEFAULT_DB_URL,
    *,
    echo: bool = False,
    connect_args: Dict[str, object] | None = None,
) -> Tuple[Engine, sessionmaker[Session]]:
    """Return an engine/session factory pair configured for SQLite by default."""

    if db_url.startswith("sqlite"):
        final_connect_args = {"check_same_thread": False}
        if connect_args:
            final_connect_args.update(connect_args)
    else:
        final_connect_args = connect_args or {}

    if db_url.endswith(":memory:"):
        engine = create_engine(
            db_url,
            echo=echo,
            connect_args=final_connect_args,
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            db_url,
            echo=echo,
            connect_args=final_connect_args,
        )
    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    return engine, session_factory


def create_schema(engine: Engine, session_factory: sessionmaker[Session]) -> None:
    """Create missing tables and bring the identifier sequences up to date."""

    Base.metadata.create_all(engine)
    with session_scope(session_factory) as session:
        ensure_sequences(session)
    logger.debug("schema ready at %s", engine.url.render_as_string(hide_password=True))


def init_db(db_url: str = DEFAULT_DB_URL, *, echo: bool = False) -> sessionmaker[Session]:
    """Create all tables and return a session factory."""

    engine, session_factory = create_session_factory(db_url, echo=echo)
    create_schema(engine, session_factory)
    return session_factory


@contextmanager
def session_scope(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""

    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        logger.debug("rolling back session after error", exc_info=True)
        session.rollback()
        raise
    finally:
        session.close()
