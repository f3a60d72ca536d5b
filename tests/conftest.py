"""
Shared test fixtures for the LeafLink backend test suite.

Provides:
- A temporary JSON key store and local plant repository
- A fake ``requests`` session standing in for the Supabase REST API
- A notification center whose timers are recorded instead of started
- A garden controller wired to the above
- A Flask app and test client built through ``create_app``

Usage:
    def test_example(controller, local_repo):
        controller.load("ana@example.com").result()
        assert controller.plants == []
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from app.domain.plant import Plant, PlantDraft  # noqa: E402
from app.services.application.garden_service import GardenController  # noqa: E402
from app.services.application.notifications_service import NotificationCenter  # noqa: E402
from infrastructure.database.json_store import JsonKeyStore  # noqa: E402
from infrastructure.database.repositories.plants import LocalPlantRepository  # noqa: E402

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


# ========================== Plant helpers ===================================


def make_plant(**overrides: Any) -> Plant:
    """A valid plant; any field can be overridden."""
    values: dict[str, Any] = {
        "id": "plant-1",
        "name": "Figgy",
        "species": "Fiddle Leaf Fig",
        "water_frequency_days": 7,
        "last_watered_date": NOW,
        "user_id": "ana@example.com",
        "created_at": NOW,
    }
    values.update(overrides)
    return Plant(**values)


def make_draft(**overrides: Any) -> PlantDraft:
    values: dict[str, Any] = {
        "name": "Figgy",
        "species": "Fiddle Leaf Fig",
        "water_frequency_days": 7,
        "user_id": "ana@example.com",
    }
    values.update(overrides)
    return PlantDraft(**values)


# ========================== Fakes ============================================


class FakeResponse:
    """Just enough of ``requests.Response`` for the REST clients."""

    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._body = body
        if text is not None:
            self.text = text
        else:
            self.text = json.dumps(body) if body is not None else ""
        self.content = self.text.encode("utf-8")

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeSession:
    """Records every call and answers from a queue of canned responses.

    Responses are matched by ``(method, path suffix)``; unmatched calls get
    the default response.
    """

    def __init__(self, default: FakeResponse | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.routes: dict[tuple[str, str], list[Any]] = {}
        self.default = default or FakeResponse(200, [])

    def queue(self, method: str, path: str, *responses: Any) -> None:
        """Queue responses (``FakeResponse`` or exceptions to raise)."""
        self.routes.setdefault((method.upper(), path), []).extend(responses)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method.upper(), "url": url, **kwargs})
        for (route_method, path), responses in self.routes.items():
            if route_method == method.upper() and url.endswith(path) and responses:
                response = responses.pop(0)
                if isinstance(response, BaseException):
                    raise response
                return response
        return self.default

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("POST", url, **kwargs)

    def calls_to(self, method: str, path: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["method"] == method.upper() and c["url"].endswith(path)]


class RecordingTimer:
    def __init__(self, interval: float, callback) -> None:
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.callback()


class RecordingTimerFactory:
    """Timer factory for :class:`NotificationCenter` that never starts threads."""

    def __init__(self) -> None:
        self.timers: list[RecordingTimer] = []

    def __call__(self, interval: float, callback) -> RecordingTimer:
        timer = RecordingTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> RecordingTimer:
        return self.timers[-1]


# ========================== Store Fixtures ==================================


@pytest.fixture()
def key_store(tmp_path):
    """JSON key store in a per-test temporary directory."""
    return JsonKeyStore(tmp_path / "store.json")


@pytest.fixture()
def local_repo(key_store):
    return LocalPlantRepository(key_store)


@pytest.fixture()
def fake_session():
    return FakeSession()


# ========================== Service Fixtures ================================


@pytest.fixture()
def timers():
    return RecordingTimerFactory()


@pytest.fixture()
def notifications(timers):
    return NotificationCenter(4.0, timer_factory=timers)


@pytest.fixture()
def posted(notifications):
    """Every notification posted (``None`` entries are expiries)."""
    seen: list = []
    notifications.subscribe(seen.append)
    return seen


@pytest.fixture()
def audit_logger():
    return MagicMock()


@pytest.fixture()
def notifier():
    mock = MagicMock()
    mock.notify_plant_added.return_value = True
    return mock


@pytest.fixture()
def make_controller(notifications, audit_logger, notifier):
    """Factory building a controller around any store; shut down after the test."""
    built: list[GardenController] = []

    def _make(store, **kwargs: Any) -> GardenController:
        kwargs.setdefault("notifier", notifier)
        kwargs.setdefault("audit_logger", audit_logger)
        kwargs.setdefault("clock", lambda: NOW)
        controller = GardenController(store, notifications, **kwargs)
        built.append(controller)
        return controller

    yield _make
    for controller in built:
        controller.shutdown()


@pytest.fixture()
def controller(make_controller, local_repo):
    """Controller over the local store, loaded for ana@example.com."""
    garden = make_controller(local_repo)
    garden.load("ana@example.com").result(timeout=5)
    return garden


# ========================== Flask Fixtures ==================================


@pytest.fixture()
def app_env(tmp_path, monkeypatch):
    """Environment for a local-mode app writing only under ``tmp_path``."""
    for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "LLM_PROVIDER", "LLM_API_KEY", "LEAFLINK_SMTP_HOST"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LEAFLINK_ENV", "testing")
    monkeypatch.setenv("LEAFLINK_LOCAL_STORE_PATH", str(tmp_path / "var" / "store.json"))
    monkeypatch.setenv("LEAFLINK_AUDIT_LOG_PATH", str(tmp_path / "logs" / "audit.log"))
    monkeypatch.setenv("LEAFLINK_LOG_DIR", str(tmp_path / "logs"))
    return tmp_path


@pytest.fixture()
def app(app_env, timers):
    from app import create_app

    flask_app = create_app(container_options={"timer_factory": timers})
    flask_app.config["TESTING"] = True
    container = flask_app.config["CONTAINER"]
    container.garden.wait_loaded(timeout=5)
    yield flask_app
    flask_app.extensions["leaflink_shutdown"]("test teardown")


@pytest.fixture()
def client(app):
    return app.test_client()
