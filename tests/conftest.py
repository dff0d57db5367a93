import pytest
from fastapi.testclient import TestClient

from quiz_intake_api.app.core.config import Settings
from quiz_intake_api.app.core.exceptions import NotificationError
from quiz_intake_api.app.main import create_app
from quiz_intake_api.app.storage import MemoryStorage


ARCHIVE_TOKEN = "archive-secret"

IVANOV = {
    "lastName": "Ivanov",
    "firstName": "Ivan",
    "age": 30,
    "phone": "+71234567890",
    "telegram": "@ivanov",
}


class RecordingNotifier:
    def __init__(self):
        self.messages = []
        self.closed = False

    def send(self, text):
        self.messages.append(text)

    def close(self):
        self.closed = True


class FailingNotifier(RecordingNotifier):
    def send(self, text):
        raise NotificationError("chat unreachable")


def make_settings(**overrides):
    values = dict(
        archive_token=ARCHIVE_TOKEN,
        storage_backend="memory",
        database_url="",
        telegram_bot_token="",
        telegram_chat_id="",
        require_score=False,
        log_level="WARNING",
        log_file="",
    )
    values.update(overrides)
    return Settings(**values)


def auth(token=ARCHIVE_TOKEN):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_client(storage, notifier):
    clients = []

    def _make(settings=None, storage_override=None, notifier_override=None):
        app = create_app(
            settings or make_settings(),
            storage=storage_override or storage,
            notifier=notifier_override or notifier,
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
