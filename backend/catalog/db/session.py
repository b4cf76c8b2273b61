import sqlite3
from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from catalog.core.config import get_settings

_engine: Engine | None = None
_session_local: sessionmaker | None = None


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        settings = get_settings()
        is_sqlite = settings.postgres_dsn.startswith("sqlite")
        connect_args = {"check_same_thread": False} if is_sqlite else {}
        engine_kwargs: dict = {"pool_pre_ping": True, "connect_args": connect_args}
        if is_sqlite and settings.app_env.lower() == "test":
            engine_kwargs["poolclass"] = NullPool
        _engine = create_engine(settings.postgres_dsn, **engine_kwargs)
    return _engine


def get_session_local() -> sessionmaker:
    global _session_local
    if _session_local is None:
        _session_local = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, class_=Session)
    return _session_local


def reset_engine_state() -> None:
    """Dispose and forget the cached engine and session factory."""
    global _engine, _session_local
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_local = None


def bind_session_factory(factory: sessionmaker) -> None:
    global _engine, _session_local
    reset_engine_state()
    _session_local = factory
    _engine = factory.kw.get("bind")


def get_db() -> Generator[Session]:
    db = get_session_local()()
    try:
        yield db
    finally:
        db.close()
