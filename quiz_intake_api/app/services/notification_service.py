"""
Best-effort notifications to a Telegram chat.

Every committed registration and test result produces a short
human-readable summary that is posted to an administrator chat through
the Telegram Bot API (``sendMessage``).  Delivery is never part of the
request's outcome: endpoints schedule :meth:`NotificationService.dispatch`
as a FastAPI background task, which runs after the response has been
sent, and ``dispatch`` swallows and logs every failure.

The Telegram client talks to the HTTP API directly with ``requests``
and retries transient failures (network errors, 5xx and 429 responses)
a bounded number of times with exponential backoff, honouring
``Retry-After`` on 429.
"""

from __future__ import annotations

import html
import logging
import random
import time
from typing import Any, Callable, Dict, Optional

import requests

from ..core.config import Settings
from ..core.exceptions import NotificationError
from ..storage.base import RegistrationRecord, TestResultRecord


logger = logging.getLogger(__name__)


class NullNotifier:
    """Notifier used when Telegram credentials are not configured."""

    def send(self, text: str) -> None:
        logger.debug("Notifications disabled; dropping message of %d chars", len(text))

    def close(self) -> None:
        pass


class TelegramNotifier:
    """Minimal Telegram Bot API client for ``sendMessage``."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        *,
        api_url: str = "https://api.telegram.org",
        session: Optional[requests.Session] = None,
        timeout: int = 10,
        max_attempts: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialise the client.

        Args:
            bot_token: Token issued by BotFather.
            chat_id: Destination chat or channel identifier.
            api_url: Base URL of the Bot API, overridable for proxies.
            session: Optional requests session, created if omitted.
            timeout: Per-request timeout in seconds.
            max_attempts: Total tries per message, including the first.
            sleep: Function used to wait between attempts.
        """
        self.chat_id = chat_id
        self.endpoint = f"{api_url.rstrip('/')}/bot{bot_token}/sendMessage"
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self._sleep = sleep

    def _backoff(self, attempt: int, resp: Optional[requests.Response] = None) -> float:
        if resp is not None and resp.status_code == 429:
            retry_after = resp.headers.get("Retry-After")
            if retry_after is not None:
                try:
                    return min(float(retry_after), 60.0)
                except ValueError:
                    pass
        return min(2 ** (attempt - 1), 60) + random.random()

    def send(self, text: str) -> None:
        """Post ``text`` to the configured chat.

        Raises:
            NotificationError: if the message could not be delivered
                after all attempts, or Telegram rejected it.
        """
        payload: Dict[str, Any] = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        last_error = "no attempt made"
        for attempt in range(1, self.max_attempts + 1):
            resp: Optional[requests.Response] = None
            try:
                resp = self.session.post(self.endpoint, json=payload, timeout=self.timeout)
            except requests.RequestException as exc:
                last_error = str(exc)
            else:
                if resp.status_code == 429 or resp.status_code >= 500:
                    last_error = f"HTTP {resp.status_code}"
                elif resp.status_code >= 400:
                    raise NotificationError(f"Telegram rejected message: HTTP {resp.status_code} {resp.text[:200]}")
                else:
                    try:
                        data = resp.json()
                    except ValueError:
                        data = None
                    if isinstance(data, dict) and not data.get("ok", False):
                        raise NotificationError(f"Telegram sendMessage failed: {data.get('description')}")
                    return
            if attempt < self.max_attempts:
                delay = self._backoff(attempt, resp)
                logger.warning(
                    "Telegram delivery attempt %d failed (%s), retrying in %.1fs", attempt, last_error, delay
                )
                self._sleep(delay)
        raise NotificationError(f"Telegram unreachable after {self.max_attempts} attempts: {last_error}")

    def close(self) -> None:
        self.session.close()


def build_notifier(settings: Settings):
    """Return a Telegram notifier, or a no-op one if credentials are missing."""
    if settings.telegram_bot_token and settings.telegram_chat_id:
        return TelegramNotifier(
            settings.telegram_bot_token,
            settings.telegram_chat_id,
            api_url=settings.telegram_api_url,
        )
    logger.info("TELEGRAM_BOT_TOKEN/TELEGRAM_CHAT_ID not set; notifications disabled")
    return NullNotifier()


def format_registration(record: RegistrationRecord) -> str:
    e = html.escape
    return (
        "📝 <b>Новая регистрация</b>\n"
        f"ID: <code>{e(record.registration_id)}</code>\n"
        f"ФИО: {e(record.full_name)}\n"
        f"Возраст: {record.age}\n"
        f"Телефон: {e(record.phone)}\n"
        f"Telegram: {e(record.telegram)}\n"
        f"Фото: {'есть' if record.photo_base64 else 'нет'}"
    )


def format_test_result(registration: RegistrationRecord, result: TestResultRecord) -> str:
    e = html.escape
    return (
        "📊 <b>Результат теста</b>\n"
        f"ID: <code>{e(result.registration_id)}</code>\n"
        f"ФИО: {e(registration.full_name)}\n"
        f"Telegram: {e(registration.telegram)}\n"
        f"Тип теста: {e(result.test_type)}\n"
        f"Уровень: {e(result.level)}\n"
        f"Баллы: {result.score}"
    )


class NotificationService:
    """Fire-and-forget front end for a notifier."""

    def __init__(self, notifier) -> None:
        self.notifier = notifier

    def dispatch(self, text: str) -> None:
        """Deliver ``text``; failures are logged and discarded."""
        try:
            self.notifier.send(text)
        except NotificationError as exc:
            logger.warning("Notification not delivered: %s", exc)
        except Exception:
            logger.exception("Unexpected error while sending notification")

    def close(self) -> None:
        self.notifier.close()
