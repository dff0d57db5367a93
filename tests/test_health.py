from fastapi.testclient import TestClient

from conftest import RecordingNotifier, make_settings
from quiz_intake_api.app.main import create_app


def test_root_is_plain_ok(client):
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.text == "OK"
    assert resp.headers["content-type"].startswith("text/plain")


def test_health_reports_storage(client):
    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["storage"] == "memory"
    assert body["uptime"] >= 0
    assert "timestamp" in body


def test_api_smoke_endpoint(client):
    body = client.get("/api/test").json()

    assert body["success"] is True
    assert body["message"]


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Маршрут не найден"}


def test_wrong_method_keeps_envelope(client):
    resp = client.get("/api/register")

    assert resp.status_code == 405
    assert resp.json()["success"] is False


def test_cors_preflight_for_allowed_origin(make_client):
    client = make_client(settings=make_settings(allowed_origins=["https://quiz.example"]))

    resp = client.options(
        "/api/register",
        headers={
            "Origin": "https://quiz.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "https://quiz.example"


def test_cors_ignores_unknown_origin(make_client):
    client = make_client(settings=make_settings(allowed_origins=["https://quiz.example"]))

    resp = client.get("/api/test", headers={"Origin": "https://evil.example"})

    assert resp.status_code == 200
    assert "access-control-allow-origin" not in resp.headers


def test_shutdown_closes_notifier(storage):
    notifier = RecordingNotifier()
    app = create_app(make_settings(), storage=storage, notifier=notifier)

    with TestClient(app):
        assert notifier.closed is False

    assert notifier.closed is True
