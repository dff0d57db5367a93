import pytest

from conftest import IVANOV, FailingNotifier, make_settings
from quiz_intake_api.app.core.exceptions import PersistenceError
from quiz_intake_api.app.services.test_result_service import DEFAULT_TEST_TYPE, resolve_test_type
from quiz_intake_api.app.storage import MemoryStorage


class RecordingStorage(MemoryStorage):
    def __init__(self):
        super().__init__()
        self.saved_results = []

    def save_test_result(self, record):
        super().save_test_result(record)
        self.saved_results.append(record)


class BrokenResultStorage(MemoryStorage):
    def save_test_result(self, record):
        raise PersistenceError()


def tested_rows(storage):
    return [row for row in storage.query_archive() if row.level is not None]


def register(client, **overrides):
    resp = client.post("/api/register", json={**IVANOV, **overrides})
    assert resp.status_code == 200
    return resp.json()["registrationId"]


def test_submit_result_for_existing_registration(client, storage):
    reg_id = register(client)

    resp = client.post(
        "/api/test-result",
        json={"registrationId": reg_id, "level": "High", "score": 85, "testData": {"test_type": "regular"}},
    )

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert len(tested_rows(storage)) == 1
    rows = storage.query_archive()
    assert rows[0].level == "High"
    assert rows[0].score == 85
    assert rows[0].test_type == "regular"


def test_unknown_registration_is_not_found(client, storage, notifier):
    resp = client.post(
        "/api/test-result",
        json={"registrationId": "REG_0", "level": "High", "score": 10},
    )

    assert resp.status_code == 404
    assert resp.json()["success"] is False
    assert len(tested_rows(storage)) == 0
    assert notifier.messages == []


@pytest.mark.parametrize("missing", ["registrationId", "level"])
def test_required_fields(client, storage, missing):
    reg_id = register(client)
    payload = {"registrationId": reg_id, "level": "Low", "score": 3}
    del payload[missing]

    resp = client.post("/api/test-result", json=payload)

    assert resp.status_code == 400
    assert missing in resp.json()["error"]
    assert len(tested_rows(storage)) == 0


def test_blank_level_is_rejected(client, storage):
    reg_id = register(client)

    resp = client.post("/api/test-result", json={"registrationId": reg_id, "level": "  ", "score": 3})

    assert resp.status_code == 400
    assert len(tested_rows(storage)) == 0


def test_missing_score_defaults_to_zero(client, storage):
    reg_id = register(client)

    resp = client.post("/api/test-result", json={"registrationId": reg_id, "level": "Medium"})

    assert resp.status_code == 200
    assert storage.query_archive()[0].score == 0


def test_missing_score_rejected_when_required(make_client, storage):
    client = make_client(settings=make_settings(require_score=True))
    reg_id = register(client)

    resp = client.post("/api/test-result", json={"registrationId": reg_id, "level": "Medium"})

    assert resp.status_code == 400
    assert "score" in resp.json()["error"]
    assert len(tested_rows(storage)) == 0


def test_result_notification_includes_name(client, notifier):
    reg_id = register(client, lastName="Petrova", firstName="Anna")
    notifier.messages.clear()

    client.post("/api/test-result", json={"registrationId": reg_id, "level": "High", "score": 85})

    assert len(notifier.messages) == 1
    text = notifier.messages[0]
    assert "Petrova Anna" in text
    assert "High" in text
    assert "85" in text


def test_test_data_is_stored_untouched(make_client):
    storage = RecordingStorage()
    client = make_client(storage_override=storage)
    reg_id = register(client)
    answers = {"answers": [1, 4, 2], "meta": {"nested": True}}

    client.post(
        "/api/test-result",
        json={"registrationId": reg_id, "level": "High", "score": 5, "testData": answers},
    )

    [stored] = storage.saved_results
    assert stored.test_data == answers


def test_result_persistence_failure_returns_500(make_client, notifier):
    storage = BrokenResultStorage()
    client = make_client(storage_override=storage)
    reg_id = register(client)
    notifier.messages.clear()

    resp = client.post("/api/test-result", json={"registrationId": reg_id, "level": "High", "score": 85})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Внутренняя ошибка сервера"}
    assert notifier.messages == []
    assert tested_rows(storage) == []


def test_notification_failure_does_not_fail_result(make_client, storage):
    client = make_client(notifier_override=FailingNotifier())
    reg_id = register(client)

    resp = client.post("/api/test-result", json={"registrationId": reg_id, "level": "High", "score": 85})

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert len(tested_rows(storage)) == 1


@pytest.mark.parametrize(
    "explicit, data, expected",
    [
        ("express", {"test_type": "regular"}, "express"),
        (None, {"test_type": "extended"}, "extended"),
        (None, {"testType": "short"}, "short"),
        ("  ", None, DEFAULT_TEST_TYPE),
        (None, ["not", "a", "dict"], DEFAULT_TEST_TYPE),
        (None, None, DEFAULT_TEST_TYPE),
    ],
)
def test_resolve_test_type(explicit, data, expected):
    assert resolve_test_type(explicit, data) == expected
