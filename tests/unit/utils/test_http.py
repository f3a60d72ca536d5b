from types import SimpleNamespace

import pytest
from flask import Flask

from app.domain.exceptions import ConflictError, ExternalServiceError, RepositoryError, ValidationError
from app.services.application.notifications_service import NotificationCenter
from app.utils.http import STORE_FAILURE_MESSAGE, safe_route, success_response
from conftest import RecordingTimerFactory


@pytest.fixture()
def notifications():
    return NotificationCenter(4.0, timer_factory=RecordingTimerFactory())


@pytest.fixture()
def client(notifications):
    app = Flask(__name__)
    app.config["CONTAINER"] = SimpleNamespace(notifications=notifications)

    errors = {
        "conflict": ConflictError("A change to Figgy is still being saved"),
        "invalid": ValidationError(""),
        "upstream": ExternalServiceError("connect timeout to db.internal:5432"),
        "boom": RuntimeError("secret stack detail"),
    }

    @app.get("/fail/<kind>")
    @safe_route("Failed to water plant")
    def fail(kind):
        if kind == "store":
            notifications.error("Failed to update: JWT expired")
            raise RepositoryError("JWT expired")
        raise errors[kind]

    @app.get("/ok")
    @safe_route()
    def ok():
        return success_response({"watered": True}, 202)

    return app.test_client()


def test_success_envelope(client):
    response = client.get("/ok")

    assert response.status_code == 202
    assert response.get_json() == {"ok": True, "data": {"watered": True}, "error": None}


def test_client_errors_keep_their_message(client):
    response = client.get("/fail/conflict")

    assert response.status_code == 409
    body = response.get_json()
    assert body["ok"] is False
    assert body["message"] == "A change to Figgy is still being saved"
    assert body["error"]["message"] == body["message"]
    assert "timestamp" in body["error"]


def test_blank_client_error_falls_back_to_route_message(client):
    response = client.get("/fail/invalid")

    assert response.status_code == 400
    assert response.get_json()["message"] == "Failed to water plant"


def test_store_failure_points_at_notification(client, notifications):
    response = client.get("/fail/store")

    assert response.status_code == 500
    body = response.get_json()
    assert body["message"] == STORE_FAILURE_MESSAGE
    assert body["details"]["notification"] == notifications.current.to_dict()
    assert body["details"]["notification"]["message"] == "Failed to update: JWT expired"


@pytest.mark.parametrize(
    ("kind", "status", "message"),
    [
        ("upstream", 502, "The plant store is not responding"),
        ("boom", 500, "An internal error occurred"),
    ],
)
def test_server_errors_are_generic(client, kind, status, message):
    response = client.get(f"/fail/{kind}")

    assert response.status_code == status
    body = response.get_json()
    assert body["message"] == message
    assert "secret" not in response.get_data(as_text=True)
    assert "db.internal" not in response.get_data(as_text=True)
