"""
Database configuration and session management.
Uses SQLAlchemy 2.x; the engine is created lazily on first use.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from saypay.config import settings
from saypay.logging_config import get_logger

logger = get_logger(__name__)

# SQLAlchemy Base for ORM models
Base = declarative_base()

_engine: Engine | None = None
_session_local: sessionmaker | None = None


def get_engine() -> Engine:
    """Get or create the engine for settings.database_url."""
    global _engine
    if _engine is None:
        connect_args = {}
        if settings.database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        _engine = create_engine(
            settings.database_url,
            pool_pre_ping=True,
            connect_args=connect_args,
            echo=False,
        )
        logger.debug("database_engine_created", url=_engine.url.render_as_string(hide_password=True))
    return _engine


def get_session_local() -> sessionmaker:
    """Get or create the session factory bound to the default engine."""
    global _session_local
    if _session_local is None:
        _session_local = sessionmaker(
            bind=get_engine(),
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_local


def init_db(engine: Engine | None = None) -> None:
    """
    Initialize database tables.
    Only used for development, scripts and tests.
    """
    # Register models on Base.metadata
    import saypay.models  # noqa: F401

    logger.info("initializing_database_tables")
    Base.metadata.create_all(bind=engine or get_engine())
    logger.info("database_tables_created")
