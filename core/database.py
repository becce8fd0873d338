"""
core/database.py -- The process-wide data-store handle.

Database owns the SQLAlchemy engine (and therefore the connection pool). It is
constructed once in the API lifespan, passed to UserStore and TaskStore, and
disposed on shutdown. There is no module-level engine: whoever builds the
handle owns its lifetime, which is what lets tests swap in an in-memory DB.

Usage:
    db = Database("sqlite:///taskboard.db")
    users = UserStore(db)
    tasks = TaskStore(db)
    ...
    db.close()
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("taskboard.db")


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


class Database:
    """Explicitly constructed handle around a SQLAlchemy engine."""

    def __init__(self, url: str) -> None:
        connect_args: dict = {}
        if url.startswith("sqlite"):
            # Route handlers run in FastAPI's thread pool.
            connect_args["check_same_thread"] = False
        self.url = url
        self.engine: Engine = create_engine(url, connect_args=connect_args)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_sqlite_pragmas)

    def ping(self) -> bool:
        """Return True if a trivial round-trip to the database succeeds."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.warning("Database ping failed", exc_info=True)
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()
