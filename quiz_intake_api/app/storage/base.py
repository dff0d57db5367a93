"""
Storage interface shared by the durable and the in-memory backends.

Handlers never touch a backend directly: the application picks one at
startup (see :func:`quiz_intake_api.app.storage.build_storage`) and
stores it on ``app.state``; services receive it through dependency
injection.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional


@dataclass(frozen=True)
class RegistrationRecord:
    registration_id: str
    last_name: str
    first_name: str
    age: int
    phone: str
    telegram: str
    created_at: datetime
    photo_base64: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.last_name} {self.first_name}"


@dataclass(frozen=True)
class TestResultRecord:
    __test__ = False

    registration_id: str
    level: str
    score: int
    test_type: str
    created_at: datetime
    test_data: Any = None


@dataclass(frozen=True)
class ArchiveRow:
    """One row of the registrations LEFT JOIN test_results view.

    Result columns are ``None`` for registrations that have no test
    result yet.
    """

    registration_id: str
    last_name: str
    first_name: str
    age: int
    phone: str
    telegram: str
    registered_at: datetime
    level: Optional[str] = None
    score: Optional[int] = None
    test_type: Optional[str] = None
    tested_at: Optional[datetime] = None


class Storage(abc.ABC):
    """Persistence operations needed by the intake and archive services.

    Implementations raise
    :class:`~quiz_intake_api.app.core.exceptions.PersistenceError` when
    the underlying store fails.  Every ``save_*`` call is atomic: it
    either persists the whole record or nothing.
    """

    #: Short backend name reported by the health endpoint.
    name: str = "abstract"

    @abc.abstractmethod
    def save_registration(self, record: RegistrationRecord) -> None:
        """Persist a new registration."""

    @abc.abstractmethod
    def get_registration(self, registration_id: str) -> Optional[RegistrationRecord]:
        """Return the registration with this id, or ``None``."""

    @abc.abstractmethod
    def save_test_result(self, record: TestResultRecord) -> None:
        """Persist a test result for an existing registration.

        Raises ``NotFoundError`` if the registration vanished between
        the caller's lookup and the insert.
        """

    @abc.abstractmethod
    def query_archive(self) -> List[ArchiveRow]:
        """Return the joined view, newest registration first.

        Within one registration, newer results come first.
        """

    @abc.abstractmethod
    def ping(self) -> bool:
        """Return ``True`` if the backend is reachable."""

    def close(self) -> None:
        """Release resources held by the backend."""
