"""Engine and session management for SQLAlchemy."""

import logging
import os
from typing import Generator
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session
from matheque.core.config import Settings
from matheque.db.models import Base

logger = logging.getLogger(__name__)

def create_db_engine(database_url: str, **kwargs) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections run in WAL mode with a busy timeout so that the webhook
    process and the discovery worker can write to the same file.

    Args:
        database_url: SQLAlchemy database URL
        **kwargs: Extra arguments forwarded to create_engine

    Returns:
        SQLAlchemy engine
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True, **kwargs)

    if url.database and url.database != ":memory:":
        directory = os.path.dirname(url.database)
        if directory:
            os.makedirs(directory, exist_ok=True)

    connect_args = kwargs.pop("connect_args", {})
    connect_args.setdefault("check_same_thread", False)
    engine = create_engine(url, connect_args=connect_args, **kwargs)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA busy_timeout = 5000")
        if url.database and url.database != ":memory:":
            cursor.execute("PRAGMA journal_mode = WAL")
        cursor.close()

    return engine

def init_db(engine: Engine) -> None:
    """Create tables, the watcher full-text index and its triggers."""
    logger.info(f"Initializing database schema on {engine.url.render_as_string(hide_password=True)}")
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")

def create_session_factory(settings: Settings) -> sessionmaker:
    """Build the engine from settings, make sure the schema exists, return a session factory."""
    engine = create_db_engine(settings.DATABASE_URL)
    init_db(engine)
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Yield a session that is rolled back on error and always closed.

    Yields:
        SQLAlchemy session instance
    """
    db = session_factory()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()
