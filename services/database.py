"""
Database setup
Engine and sessionmaker factory for the session store
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from models.base import Base
# Registers the user_sessions table on Base.metadata
import models.user_session  # noqa: F401
from services.errors import StorageError

logger = logging.getLogger("seraglio")


def create_db_engine(database_url: str) -> Engine:
    """
    Create the SQLAlchemy engine.

    SQLite connections are shared with worker threads (the tracker runs store
    calls through asyncio.to_thread), so same-thread checking is turned off.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        The engine
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args
    )


def init_database(database_url: str) -> sessionmaker:
    """
    Create the engine, make sure the schema exists and return a sessionmaker.

    Raises:
        StorageError: If the database cannot be opened or migrated
    """
    try:
        engine = create_db_engine(database_url)
        Base.metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise StorageError(f"Error opening database: {e}") from e

    logger.info(f"Database ready at {engine.url.render_as_string(hide_password=True)}")
    # Rows handed out by the store stay readable after their session closes
    return sessionmaker(bind=engine, expire_on_commit=False)
