"""
Database integration.

This module declares the two tables used by the service and builds the
SQLAlchemy engine that backs :class:`~quiz_intake_api.app.storage.sql.SqlStorage`.
Any SQLAlchemy URL works; the original deployment ran PostgreSQL and
local development typically uses a SQLite file.

For server databases the engine keeps a bounded connection pool
(``DB_POOL_SIZE`` connections, ``DB_MAX_OVERFLOW`` extra) that is shared
by all concurrent requests.  SQLite connections are created with
``check_same_thread=False`` because requests are served from a thread
pool, and foreign-key enforcement is switched on for every connection
(SQLite ignores ``REFERENCES`` clauses otherwise).

Tables are created with ``metadata.create_all``, which is idempotent,
during application startup (see ``init_db``).
"""

import logging

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from .config import Settings


logger = logging.getLogger(__name__)

metadata = MetaData()

registrations = Table(
    "registrations",
    metadata,
    Column("registration_id", String(255), primary_key=True),
    Column("last_name", String(255), nullable=False),
    Column("first_name", String(255), nullable=False),
    Column("age", Integer, nullable=False),
    Column("phone", String(255), nullable=False),
    Column("telegram", String(255), nullable=False),
    Column("photo_base64", Text, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, index=True),
)

test_results = Table(
    "test_results",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "registration_id",
        String(255),
        ForeignKey("registrations.registration_id"),
        nullable=False,
        index=True,
    ),
    Column("test_type", String(255), nullable=False),
    Column("test_data", JSON, nullable=True),
    Column("level", String(255), nullable=False),
    Column("score", Integer, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys = ON")
    finally:
        cursor.close()


def create_db_engine(settings: Settings) -> Engine:
    """Create the SQLAlchemy engine described by ``settings``.

    Parameters
    ----------
    settings : Settings
        Application settings; ``database_url`` must be non-empty.

    Returns
    -------
    Engine
        A lazily connecting engine.  No connection is opened here.
    """
    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            # A private in-memory database only exists on one connection.
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_engine(
            url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
        )
    logger.debug("Created database engine for %s", url.render_as_string(hide_password=True))
    return engine


def init_db(engine: Engine) -> None:
    """Create missing tables.  Safe to call on every startup."""
    metadata.create_all(engine)
