"""
Business logic for the archive export.

Reads the joined registration/result view from storage and reshapes
each row for the admin page: a composed full name and a single
``date`` that prefers the result's timestamp.  Authorisation happens
before this service is constructed (see ``core.security``).
"""

from typing import List

from starlette.concurrency import run_in_threadpool

from ..schemas.archive import ArchiveRecord
from ..storage.base import ArchiveRow, Storage


def to_archive_record(row: ArchiveRow) -> ArchiveRecord:
    return ArchiveRecord(
        registration_id=row.registration_id,
        fio=f"{row.last_name} {row.first_name}",
        age=row.age,
        phone=row.phone,
        telegram=row.telegram,
        level=row.level,
        score=row.score,
        test_type=row.test_type,
        date=row.tested_at or row.registered_at,
    )


class ArchiveService:
    """Service for the archive read path."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    async def list_records(self) -> List[ArchiveRecord]:
        """Return all archive records, newest registration first."""
        rows = await run_in_threadpool(self.storage.query_archive)
        return [to_archive_record(row) for row in rows]
