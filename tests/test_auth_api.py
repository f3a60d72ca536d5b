"""Session endpoints in demo mode and against a fake Supabase project."""

import pytest

from conftest import FakeResponse, FakeSession, make_plant

BASE = "https://garden.supabase.co"

TOKEN_BODY = {
    "access_token": "jwt-ana",
    "refresh_token": "refresh-ana",
    "expires_in": 3600,
    "user": {"id": "uuid-ana", "email": "ana@example.com"},
}


@pytest.fixture()
def supabase():
    return FakeSession()


@pytest.fixture()
def remote_app(app_env, monkeypatch, timers, supabase):
    monkeypatch.setenv("SUPABASE_URL", BASE)
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")

    from app import create_app

    flask_app = create_app(container_options={"timer_factory": timers, "http_session": supabase})
    yield flask_app
    flask_app.extensions["leaflink_shutdown"]("test teardown")


@pytest.fixture()
def remote_client(remote_app):
    return remote_app.test_client()


def test_demo_session(client):
    data = client.get("/auth/session").get_json()["data"]

    assert data["mode"] == "local"
    assert data["session"]["userId"] == "demo-user"
    assert data["session"]["demo"] is True


def test_credentials_are_validated(client):
    response = client.post("/auth/sign-in", json={"email": "not-an-email", "password": "hunter22"})
    assert response.status_code == 400

    response = client.post("/auth/sign-up", json={"email": "ana@example.com", "password": "123"})
    assert response.status_code == 400


def test_garden_requires_sign_in_when_remote(remote_client):
    assert remote_client.get("/auth/session").get_json()["data"] == {"session": None, "mode": "remote"}

    response = remote_client.get("/api/v1/garden/plants")

    assert response.status_code == 401
    assert response.get_json()["error"]["message"] == "Sign in to see your garden"


def test_sign_in_loads_the_users_garden(remote_app, remote_client, supabase):
    supabase.queue("POST", "/auth/v1/token", FakeResponse(200, TOKEN_BODY))
    supabase.queue("GET", "/rest/v1/plants", FakeResponse(200, [make_plant(id="fig").to_record()]))

    response = remote_client.post("/auth/sign-in", json={"email": "ana@example.com", "password": "hunter22"})

    assert response.status_code == 200
    assert response.get_json()["data"]["session"]["userId"] == "ana@example.com"
    remote_app.config["CONTAINER"].garden.wait_loaded(timeout=5)

    [select] = supabase.calls_to("GET", "/rest/v1/plants")
    assert select["params"]["userId"] == "eq.ana@example.com"
    assert select["headers"]["Authorization"] == "Bearer jwt-ana"

    plants = remote_client.get("/api/v1/garden/plants").get_json()["data"]["plants"]
    assert [p["id"] for p in plants] == ["fig"]


def test_bad_credentials_return_provider_message(remote_client, supabase):
    supabase.queue("POST", "/auth/v1/token", FakeResponse(400, {"error_description": "Invalid login credentials"}))

    response = remote_client.post("/auth/sign-in", json={"email": "ana@example.com", "password": "wrong-pass"})

    assert response.status_code == 401
    assert response.get_json()["error"]["message"] == "Invalid login credentials"


def test_sign_up_then_sign_in_is_required(remote_client, supabase):
    supabase.queue("POST", "/auth/v1/signup", FakeResponse(200, {"id": "uuid-bo", "email": "bo@example.com"}))

    response = remote_client.post("/auth/sign-up", json={"email": "bo@example.com", "password": "hunter22"})

    assert response.status_code == 201
    body = response.get_json()
    assert body["data"]["user"] == {"email": "bo@example.com", "id": "uuid-bo"}
    assert "sign in" in body["message"]
    assert remote_client.get("/auth/session").get_json()["data"]["session"] is None


def test_sign_out_empties_the_garden(remote_app, remote_client, supabase):
    supabase.queue("POST", "/auth/v1/token", FakeResponse(200, TOKEN_BODY))
    supabase.queue("GET", "/rest/v1/plants", FakeResponse(200, [make_plant(id="fig").to_record()]))
    remote_client.post("/auth/sign-in", json={"email": "ana@example.com", "password": "hunter22"})
    garden = remote_app.config["CONTAINER"].garden
    garden.wait_loaded(timeout=5)

    response = remote_client.post("/auth/sign-out")

    assert response.status_code == 200
    assert garden.plants == []
    assert garden.identity is None
    assert supabase.calls_to("POST", "/auth/v1/logout")
    assert remote_client.get("/api/v1/garden/plants").status_code == 401
