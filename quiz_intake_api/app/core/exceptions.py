"""
Error taxonomy shared by the services and the HTTP layer.

Services raise subclasses of :class:`IntakeError`; the application
registers a single exception handler (see ``main.py``) that turns them
into the ``{"success": false, "error": ...}`` envelope with the
matching status code.  ``message`` is what the caller sees, so it must
never carry driver errors or stack traces; the underlying cause is
chained with ``raise ... from exc`` and logged instead.
"""

from typing import Dict, Optional


class IntakeError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    default_message: str = "Внутренняя ошибка сервера"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None


class ValidationError(IntakeError):
    """Required input is missing or malformed."""

    status_code = 400
    default_message = "Все поля обязательны"


class NotFoundError(IntakeError):
    """A referenced registration does not exist."""

    status_code = 404
    default_message = "Регистрация не найдена"


class UnauthorizedError(IntakeError):
    """Missing or wrong archive credential."""

    status_code = 401
    default_message = "Неавторизованный доступ"

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class PersistenceError(IntakeError):
    """The datastore rejected or failed a read or write."""

    status_code = 500
    default_message = "Внутренняя ошибка сервера"


class NotificationError(Exception):
    """Delivery to the notification sink failed.

    Not an :class:`IntakeError`: the notification dispatcher catches it
    and it never reaches a client.
    """
