"""
Ephemeral in-memory storage.

Used when no database is configured, when the database cannot be
reached at startup in ``auto`` mode, and in tests.  Records live only
as long as the process.  A lock guards the dictionaries because
FastAPI runs storage calls from a thread pool.
"""

import threading
from itertools import count
from typing import Dict, List, Optional, Tuple

from ..core.exceptions import NotFoundError, PersistenceError
from .base import ArchiveRow, RegistrationRecord, Storage, TestResultRecord


class MemoryStorage(Storage):
    """Dictionary-backed implementation of :class:`Storage`."""

    name = "memory"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._seq = count()
        # registration_id -> (insertion sequence, record)
        self._registrations: Dict[str, Tuple[int, RegistrationRecord]] = {}
        self._results: List[Tuple[int, TestResultRecord]] = []

    def save_registration(self, record: RegistrationRecord) -> None:
        with self._lock:
            if record.registration_id in self._registrations:
                # same outcome as a primary-key violation in SqlStorage
                raise PersistenceError()
            self._registrations[record.registration_id] = (next(self._seq), record)

    def get_registration(self, registration_id: str) -> Optional[RegistrationRecord]:
        with self._lock:
            entry = self._registrations.get(registration_id)
        return entry[1] if entry else None

    def save_test_result(self, record: TestResultRecord) -> None:
        with self._lock:
            if record.registration_id not in self._registrations:
                raise NotFoundError()
            self._results.append((next(self._seq), record))

    def query_archive(self) -> List[ArchiveRow]:
        with self._lock:
            registrations = list(self._registrations.values())
            results = list(self._results)

        by_registration: Dict[str, List[Tuple[int, TestResultRecord]]] = {}
        for seq, result in results:
            by_registration.setdefault(result.registration_id, []).append((seq, result))

        registrations.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        rows: List[ArchiveRow] = []
        for _, reg in registrations:
            own = sorted(
                by_registration.get(reg.registration_id, []),
                key=lambda item: (item[1].created_at, item[0]),
                reverse=True,
            )
            if not own:
                rows.append(_row(reg))
                continue
            rows.extend(_row(reg, result) for _, result in own)
        return rows

    def ping(self) -> bool:
        return True


def _row(reg: RegistrationRecord, result: Optional[TestResultRecord] = None) -> ArchiveRow:
    return ArchiveRow(
        registration_id=reg.registration_id,
        last_name=reg.last_name,
        first_name=reg.first_name,
        age=reg.age,
        phone=reg.phone,
        telegram=reg.telegram,
        registered_at=reg.created_at,
        level=result.level if result else None,
        score=result.score if result else None,
        test_type=result.test_type if result else None,
        tested_at=result.created_at if result else None,
    )
