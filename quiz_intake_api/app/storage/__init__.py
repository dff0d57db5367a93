"""
Storage backends and the startup-time selection between them.

``STORAGE_BACKEND`` chooses the backend:

``sql``
    Always use the database; startup fails if it is unreachable.
``memory``
    Keep everything in process memory.
``auto`` (default)
    Use the database when ``DATABASE_URL`` is set and reachable,
    otherwise fall back to memory and log a warning.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from ..core.config import Settings
from ..core.db import create_db_engine, init_db
from .base import ArchiveRow, RegistrationRecord, Storage, TestResultRecord
from .memory import MemoryStorage
from .sql import SqlStorage


logger = logging.getLogger(__name__)

__all__ = [
    "ArchiveRow",
    "MemoryStorage",
    "RegistrationRecord",
    "SqlStorage",
    "Storage",
    "TestResultRecord",
    "build_storage",
]

BACKENDS = {"sql", "memory", "auto"}


def build_storage(settings: Settings) -> Storage:
    """Create the storage backend selected by ``settings``.

    For the SQL backend the tables are created if missing.

    Raises
    ------
    ValueError
        If ``storage_backend`` is unknown, or is ``sql`` without a
        ``database_url``.
    SQLAlchemyError
        If ``storage_backend`` is ``sql`` and the database cannot be
        initialised.
    """
    backend = settings.storage_backend.lower()
    if backend not in BACKENDS:
        raise ValueError(f"Unknown STORAGE_BACKEND {settings.storage_backend!r}")

    if backend == "memory" or (backend == "auto" and not settings.database_url):
        logger.info("Using in-memory storage; records are lost on restart")
        return MemoryStorage()

    if not settings.database_url:
        raise ValueError("STORAGE_BACKEND=sql requires DATABASE_URL")

    engine = create_db_engine(settings)
    try:
        init_db(engine)
    except SQLAlchemyError as exc:
        engine.dispose()
        if backend == "sql":
            raise
        logger.warning("Database unavailable (%s); falling back to in-memory storage", exc)
        return MemoryStorage()

    logger.info("Using SQL storage (%s dialect)", engine.dialect.name)
    return SqlStorage(engine)
