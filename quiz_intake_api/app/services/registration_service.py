"""
Business logic for registrations.

A registration is validated by :class:`RegistrationCreate`, given a
server-generated identifier, written to storage and only then
announced to the notification sink.  Identical submissions are not
deduplicated: every call creates a new record with a new identifier.
"""

import logging
import random
import threading
import time
from datetime import datetime, timezone

from fastapi import BackgroundTasks
from starlette.concurrency import run_in_threadpool

from ..schemas.registration import RegistrationCreate
from ..storage.base import RegistrationRecord, Storage
from .notification_service import NotificationService, format_registration


class RegistrationIdGenerator:
    """Produce ``REG_<millis><salt>`` identifiers.

    The millisecond part never repeats within a process: when two calls
    land in the same millisecond (or the clock steps back) the previous
    value is bumped by one.  The three-digit random salt makes clashes
    between processes sharing one database unlikely; the primary key
    catches the rest.
    """

    prefix = "REG_"

    def __init__(self, clock=time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._last = 0

    def __call__(self) -> str:
        with self._lock:
            millis = int(self._clock() * 1000)
            if millis <= self._last:
                millis = self._last + 1
            self._last = millis
        return f"{self.prefix}{millis}{random.randint(0, 999):03d}"


generate_registration_id = RegistrationIdGenerator()


class RegistrationService:
    """Service for the registration write path."""

    def __init__(self, storage: Storage, notifications: NotificationService) -> None:
        self.storage = storage
        self.notifications = notifications

    async def submit(
        self, data: RegistrationCreate, background_tasks: BackgroundTasks
    ) -> RegistrationRecord:
        """Persist a registration and schedule its notification.

        Parameters
        ----------
        data : RegistrationCreate
            Validated form fields.
        background_tasks : BackgroundTasks
            Request-scoped task list; the notification is appended only
            after the insert has committed.

        Returns
        -------
        RegistrationRecord
            The stored record, including the generated identifier.

        Raises
        ------
        PersistenceError
            If the insert failed.  Nothing is scheduled in that case.
        """
        logger = logging.getLogger(__name__)
        record = RegistrationRecord(
            registration_id=generate_registration_id(),
            last_name=data.last_name,
            first_name=data.first_name,
            age=data.age,
            phone=data.phone,
            telegram=data.telegram,
            photo_base64=data.photo_base64,
            created_at=datetime.now(timezone.utc),
        )
        await run_in_threadpool(self.storage.save_registration, record)
        logger.info("Registration %s saved (%s)", record.registration_id, self.storage.name)
        background_tasks.add_task(self.notifications.dispatch, format_registration(record))
        return record
