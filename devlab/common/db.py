"""
Engine and session helpers.

No engine exists at import time; the API builds one from its settings
during startup.
"""

from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from .models import Base


def is_sqlite(database_url: str) -> bool:
    return make_url(database_url).get_backend_name() == "sqlite"


def enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_from_url(database_url: str, echo: bool = False) -> Engine:
    """
    Build an engine for the learner database.

    SQLite gets cross-thread connections (FastAPI runs sync handlers in
    a threadpool) and foreign key enforcement. Server databases get a
    health-checked connection pool.

    Args:
        database_url: SQLAlchemy URL
        echo: Log every SQL statement

    Returns:
        Engine: Configured engine
    """
    if is_sqlite(database_url):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo
        )
        event.listen(engine, "connect", enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        echo=echo
    )


def create_schema(engine: Engine) -> None:
    """Create any missing tables. Existing tables are left untouched."""
    Base.metadata.create_all(engine)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    # objects stay readable after commit so handlers can serialize them
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False
    )


def get_db_session(
    session_factory: sessionmaker[Session]
) -> Generator[Session, Any, None]:
    """Yield one session per request and always close it."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
