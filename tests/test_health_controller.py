from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from controllers.health_controller import HealthController
from main import create_health_app
from services.errors import StorageError
from services.session_store import SessionStore
from services.session_tracker import SessionTracker
from tests.helpers import T0


def test_health_reports_open_sessions(store):
    store.create("u1", "g1", "c1", T0)
    controller = HealthController(SessionTracker(store), store)
    client = TestClient(create_health_app(controller))

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["bot_ready"] is False
    assert body["open_sessions"] == 1
    assert body["tracker"]["accepting"] is True


def test_ready_follows_bot_state(store):
    controller = HealthController(SessionTracker(store), store)
    client = TestClient(create_health_app(controller))
    assert client.get("/ready").json()["status"] == "starting"

    bot = MagicMock()
    bot.is_closed.return_value = False
    bot.is_ready.return_value = True
    controller.set_bot(bot)

    body = client.get("/ready").json()
    assert body == {"status": "ready", "bot_ready": True, "accepting_events": True}


def test_health_degraded_when_store_fails():
    store = MagicMock(spec=SessionStore)
    store.count_open.side_effect = StorageError("database is locked")
    controller = HealthController(SessionTracker(store), store)
    client = TestClient(create_health_app(controller))

    body = client.get("/health").json()
    assert body["status"] == "degraded"
    assert body["open_sessions"] is None

    stats = client.get("/api/stats").json()
    assert stats["open_sessions"] is None
    assert stats["tracker"]["events_handled"] == 0
