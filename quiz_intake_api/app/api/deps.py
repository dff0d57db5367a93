"""
FastAPI dependencies that hand request handlers their collaborators.

The storage backend and the notification service are created once at
startup and kept on ``app.state``; services are cheap wrappers built
per request around them.
"""

from fastapi import Depends, Request

from ..core.config import Settings
from ..services.archive_service import ArchiveService
from ..services.notification_service import NotificationService
from ..services.registration_service import RegistrationService
from ..services.test_result_service import TestResultService
from ..storage.base import Storage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_notifications(request: Request) -> NotificationService:
    return request.app.state.notifications


def get_registration_service(
    storage: Storage = Depends(get_storage),
    notifications: NotificationService = Depends(get_notifications),
) -> RegistrationService:
    return RegistrationService(storage, notifications)


def get_test_result_service(
    storage: Storage = Depends(get_storage),
    notifications: NotificationService = Depends(get_notifications),
    settings: Settings = Depends(get_settings),
) -> TestResultService:
    return TestResultService(storage, notifications, require_score=settings.require_score)


def get_archive_service(storage: Storage = Depends(get_storage)) -> ArchiveService:
    return ArchiveService(storage)
