import pytest
import requests

from app.config import AppConfig
from app.domain.exceptions import RepositoryError
from infrastructure.database.repositories.plants import (
    LocalPlantRepository,
    RemotePlantRepository,
    create_plant_repository,
)
from infrastructure.database.rest_client import PostgrestClient
from conftest import FakeResponse, make_draft, make_plant

BASE = "https://garden.supabase.co"


def _repo(session, id_factory=None):
    client = PostgrestClient(BASE, "anon-key", session=session, timeout=3)
    if id_factory is None:
        return RemotePlantRepository(client)
    return RemotePlantRepository(client, id_factory=id_factory)


def test_list_filters_by_user_then_orders_newest_first(fake_session):
    fake_session.queue("GET", "/rest/v1/plants", FakeResponse(200, [make_plant().to_record()]))

    plants = _repo(fake_session).list_plants("ana@example.com")

    assert [p.id for p in plants] == ["plant-1"]
    [call] = fake_session.calls
    assert call["url"] == f"{BASE}/rest/v1/plants"
    assert call["params"] == {"select": "*", "userId": "eq.ana@example.com", "order": "created_at.desc"}
    assert call["headers"]["apikey"] == "anon-key"
    assert call["timeout"] == 3


def test_list_fails_open_on_backend_error(fake_session):
    fake_session.queue("GET", "/rest/v1/plants", FakeResponse(500, {"message": "relation does not exist"}))
    assert _repo(fake_session).list_plants("ana@example.com") == []


def test_list_fails_open_on_network_error(fake_session):
    fake_session.queue("GET", "/rest/v1/plants", requests.ConnectionError("offline"))
    assert _repo(fake_session).list_plants("ana@example.com") == []


def test_create_inserts_pregenerated_id_and_returns_stored_row(fake_session):
    def echo_insert(method, url, **kwargs):
        fake_session.calls.append({"method": method, "url": url, **kwargs})
        return FakeResponse(201, kwargs["json"])

    fake_session.request = echo_insert

    plant = _repo(fake_session, id_factory=lambda: "uuid-1").create_plant(make_draft())

    assert plant.id == "uuid-1"
    [call] = fake_session.calls
    assert call["method"] == "POST"
    assert call["headers"]["Prefer"] == "return=representation"
    assert call["json"][0]["waterFrequencyDays"] == 7
    assert call["json"][0]["userId"] == "ana@example.com"


def test_create_raises_with_backend_message(fake_session):
    fake_session.queue("POST", "/rest/v1/plants", FakeResponse(403, {"message": "new row violates row-level security"}))

    with pytest.raises(RepositoryError, match="row-level security"):
        _repo(fake_session).create_plant(make_draft())


def test_create_rejects_invalid_row(fake_session):
    fake_session.queue("POST", "/rest/v1/plants", FakeResponse(201, [{"id": "x"}]))

    with pytest.raises(RepositoryError, match="invalid plant"):
        _repo(fake_session).create_plant(make_draft())


def test_update_patches_by_id(fake_session):
    fake_session.queue("PATCH", "/rest/v1/plants", FakeResponse(204))
    plant = make_plant(name="Renamed")

    _repo(fake_session).update_plant(plant)

    [call] = fake_session.calls
    assert call["method"] == "PATCH"
    assert call["params"] == {"id": "eq.plant-1"}
    assert call["json"]["name"] == "Renamed"


def test_update_failure_raises(fake_session):
    fake_session.queue("PATCH", "/rest/v1/plants", FakeResponse(502, text="Bad Gateway"))

    with pytest.raises(RepositoryError, match="Bad Gateway"):
        _repo(fake_session).update_plant(make_plant())


def test_delete_by_id(fake_session):
    fake_session.queue("DELETE", "/rest/v1/plants", FakeResponse(204))

    _repo(fake_session).delete_plant("plant-1")

    [call] = fake_session.calls
    assert call["method"] == "DELETE"
    assert call["params"] == {"id": "eq.plant-1"}


def test_access_token_replaces_anon_bearer(fake_session):
    client = PostgrestClient(BASE, "anon-key", session=fake_session)
    client.set_access_token("user-jwt")
    client.select("plants")

    assert fake_session.calls[0]["headers"]["Authorization"] == "Bearer user-jwt"


def test_factory_picks_remote_only_when_fully_configured(tmp_path):
    local = create_plant_repository(
        AppConfig(supabase_url=BASE, supabase_key="", local_store_path=str(tmp_path / "s.json"))
    )
    remote = create_plant_repository(
        AppConfig(supabase_url=BASE, supabase_key="anon", local_store_path=str(tmp_path / "s.json"))
    )

    assert isinstance(local, LocalPlantRepository)
    assert isinstance(remote, RemotePlantRepository)
