"""
Durable storage on top of a SQLAlchemy engine.

Each write runs in its own transaction (``engine.begin()``) so a
successful return means the row is committed.  Driver errors are
logged with their traceback and re-raised as ``PersistenceError``; the
public message stays generic.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import insert, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..core.db import registrations, test_results
from ..core.exceptions import NotFoundError, PersistenceError
from .base import ArchiveRow, RegistrationRecord, Storage, TestResultRecord


logger = logging.getLogger(__name__)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlStorage(Storage):
    """Relational implementation of :class:`Storage`."""

    name = "sql"

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def save_registration(self, record: RegistrationRecord) -> None:
        stmt = insert(registrations).values(
            registration_id=record.registration_id,
            last_name=record.last_name,
            first_name=record.first_name,
            age=record.age,
            phone=record.phone,
            telegram=record.telegram,
            photo_base64=record.photo_base64,
            created_at=record.created_at,
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("Failed to save registration %s", record.registration_id)
            raise PersistenceError() from exc

    def get_registration(self, registration_id: str) -> Optional[RegistrationRecord]:
        stmt = select(registrations).where(registrations.c.registration_id == registration_id)
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            logger.exception("Failed to load registration %s", registration_id)
            raise PersistenceError() from exc
        if row is None:
            return None
        return RegistrationRecord(
            registration_id=row["registration_id"],
            last_name=row["last_name"],
            first_name=row["first_name"],
            age=row["age"],
            phone=row["phone"],
            telegram=row["telegram"],
            photo_base64=row["photo_base64"],
            created_at=_aware(row["created_at"]),
        )

    def save_test_result(self, record: TestResultRecord) -> None:
        stmt = insert(test_results).values(
            registration_id=record.registration_id,
            test_type=record.test_type,
            test_data=record.test_data,
            level=record.level,
            score=record.score,
            created_at=record.created_at,
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except IntegrityError as exc:
            # The only constraint a valid payload can break is the foreign key.
            logger.warning(
                "Test result rejected by foreign key for %s: %s", record.registration_id, exc.orig
            )
            raise NotFoundError() from exc
        except SQLAlchemyError as exc:
            logger.exception("Failed to save test result for %s", record.registration_id)
            raise PersistenceError() from exc

    def query_archive(self) -> List[ArchiveRow]:
        r, t = registrations.c, test_results.c
        stmt = (
            select(
                r.registration_id,
                r.last_name,
                r.first_name,
                r.age,
                r.phone,
                r.telegram,
                r.created_at.label("registered_at"),
                t.level,
                t.score,
                t.test_type,
                t.created_at.label("tested_at"),
            )
            .select_from(
                registrations.outerjoin(test_results, r.registration_id == t.registration_id)
            )
            .order_by(r.created_at.desc(), r.registration_id.desc(), t.created_at.desc(), t.id.desc())
        )
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            logger.exception("Archive query failed")
            raise PersistenceError("Ошибка загрузки архива") from exc
        return [
            ArchiveRow(
                registration_id=row["registration_id"],
                last_name=row["last_name"],
                first_name=row["first_name"],
                age=row["age"],
                phone=row["phone"],
                telegram=row["telegram"],
                registered_at=_aware(row["registered_at"]),
                level=row["level"],
                score=row["score"],
                test_type=row["test_type"],
                tested_at=_aware(row["tested_at"]),
            )
            for row in rows
        ]

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Database ping failed: %s", exc)
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()
