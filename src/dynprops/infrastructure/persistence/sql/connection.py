"""SQLAlchemy engine factory."""

from typing import Any

import sqlalchemy as sa
from sqlalchemy import event
from sqlalchemy.pool import StaticPool


def create_db_engine(database_url: str, echo: bool = False, **kwargs: Any) -> sa.Engine:
    """Create engine for PostgreSQL (psycopg), MySQL (PyMySQL) or SQLite.

    In-memory SQLite URLs share a single connection so every unit of work
    sees the same database.
    """
    url = sa.make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            kwargs.setdefault("poolclass", StaticPool)
            kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = sa.create_engine(url, echo=echo, **kwargs)
        _configure_sqlite(engine)
        return engine
    kwargs.setdefault("pool_pre_ping", True)
    return sa.create_engine(url, echo=echo, **kwargs)


def _configure_sqlite(engine: sa.Engine) -> None:
    """Enable foreign keys and let SQLAlchemy own BEGIN so SAVEPOINT works."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: sa.Connection) -> None:
        conn.exec_driver_sql("BEGIN")
