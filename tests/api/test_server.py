"""
HTTP surface tests for the Feed Video System API.
"""

import pytest
from fastapi.testclient import TestClient

from feed_video_system.api.server import APIServer
from feed_video_system.cart.lock_timer import LockExpiryTimer
from feed_video_system.core.device import DevicePlatform
from feed_video_system.playback.integration import PlaybackModule


@pytest.fixture
def api_server(config, event_system):
    playback_module = PlaybackModule(config, event_system=event_system, device_platform=DevicePlatform.IOS)
    lock_timer = LockExpiryTimer(config.cart_lock, event_system)
    return APIServer(config, event_system, playback_module, lock_timer)


@pytest.fixture
def client(api_server):
    with TestClient(api_server.app) as test_client:
        yield test_client


def register(client, *video_ids, **body):
    for video_id in video_ids:
        response = client.post(f"/playback/videos/{video_id}", json=body or None)
        assert response.status_code == 200


def test_root_and_health(client):
    assert client.get("/").json()["message"] == "Feed Video System API"
    assert client.get("/health").json()["status"] == "healthy"


def test_lifespan_runs_lock_timer(api_server):
    with TestClient(api_server.app):
        assert api_server.lock_timer.is_running

    assert not api_server.lock_timer.is_running


def test_start_evicts_oldest_on_ios(client):
    register(client, "a", "b", "c")

    for video_id in ("a", "b", "c"):
        response = client.post(f"/playback/videos/{video_id}/start")
        assert response.status_code == 200

    assert response.json()["playing_ids"] == ["b", "c"]

    status = client.get("/playback/status").json()
    assert status["max_simultaneous"] == 2
    assert status["currently_playing"] == 2
    assert status["free_slots"] == 0
    assert client.get("/playback/videos/a").json()["is_playing"] is False


def test_start_unknown_video_is_404(client):
    assert client.post("/playback/videos/ghost/start").status_code == 404
    assert client.post("/playback/videos/ghost/stop").status_code == 404
    assert client.get("/playback/videos/ghost").status_code == 404


def test_start_failure_is_409(client):
    register(client, "bad", fail_play=True)

    response = client.post("/playback/videos/bad/start")

    assert response.status_code == 409
    assert client.get("/playback/status").json()["playing_ids"] == []


def test_stop_and_unregister(client):
    register(client, "a")
    client.post("/playback/videos/a/start")

    stopped = client.post("/playback/videos/a/stop").json()
    assert stopped["message"] == "Video stopped"
    assert stopped["playing_ids"] == []
    assert client.post("/playback/videos/a/stop").json()["message"] == "Video was not playing"

    assert client.delete("/playback/videos/a").status_code == 200
    assert client.get("/playback/videos/a").status_code == 404


def test_set_loaded(client):
    register(client, "a")

    response = client.post("/playback/videos/a/loaded", json={"loaded": True})

    assert response.json()["is_loaded"] is True


def test_pause_all(client):
    register(client, "a", "b")
    client.post("/playback/videos/a/start")
    client.post("/playback/videos/b/start")

    response = client.post("/playback/pause-all")

    assert response.json()["data"] == {"stopped": 2}
    assert client.get("/playback/status").json()["currently_playing"] == 0


def test_preload_batch_and_check(client):
    response = client.post("/preload/batch", json={"urls": ["v1", "v2", "v3", "v4"], "priority_index": 1})

    assert response.status_code == 200
    assert response.json()["processed"] == 3
    assert response.json()["preloaded_urls"] == ["v2", "v1", "v3"]

    assert client.get("/preload/check", params={"url": "v2"}).json()["preloaded"] is True
    assert client.get("/preload/check", params={"url": "v4"}).json()["preloaded"] is False

    status = client.get("/preload/status").json()
    assert status["max_preloaded"] == 3
    assert status["preloaded_count"] == 3


def test_preload_evict_and_clear(client):
    client.post("/preload/batch", json={"urls": ["v1", "v2"]})

    assert client.delete("/preload", params={"url": "v1"}).status_code == 200
    assert client.delete("/preload", params={"url": "v1"}).status_code == 404
    assert client.delete("/preload").json()["data"] == {"cleared": 1}
    assert client.get("/preload/status").json()["preloaded_urls"] == []


def test_cancel_without_batch(client):
    response = client.post("/preload/cancel")

    assert response.json()["data"] == {"cancelled": False}


def test_cart_lock_lifecycle(client):
    response = client.post("/cart/locks", json={"product_id": "p1", "name": "Sneakers", "price": 59.0})
    assert response.status_code == 200
    locked = response.json()
    assert locked["status"] == "active"
    assert locked["cashback"] == "Upto 12% cash back"
    assert locked["remaining_display"] == "15:00"

    listing = client.get("/cart/locks").json()
    assert listing["count"] == 1
    assert listing["total"] == 59.0

    assert client.delete(f"/cart/locks/{locked['id']}").status_code == 200
    assert client.delete(f"/cart/locks/{locked['id']}").status_code == 404
    assert client.get("/cart/locks").json()["count"] == 0


def test_cart_lock_validation(client):
    bad_category = {"product_id": "p1", "name": "Sneakers", "price": 10.0, "category": "groceries"}
    negative_price = {"product_id": "p1", "name": "Sneakers", "price": -1}

    assert client.post("/cart/locks", json=bad_category).status_code == 422
    assert client.post("/cart/locks", json=negative_price).status_code == 422


def test_system_status_and_events(client):
    register(client, "a")
    client.post("/playback/videos/a/start")

    status = client.get("/system/status").json()
    assert status["platform"] == "ios"
    assert status["playback"]["playing_ids"] == ["a"]
    assert status["locked_products"] == 0

    events = client.get("/events", params={"limit": 5}).json()
    assert [e["event_type"] for e in events] == ["video_registered", "video_started"]


def test_background_batch_can_be_cancelled(config, event_system):
    config.preload.inter_task_delay_ms = 10_000
    playback_module = PlaybackModule(config, event_system=event_system, device_platform=DevicePlatform.IOS)
    server = APIServer(config, event_system, playback_module, LockExpiryTimer(config.cart_lock, event_system))

    with TestClient(server.app) as client:
        response = client.post("/preload/batch", json={"urls": ["v1", "v2", "v3", "v4"], "priority_index": 1, "background": True})
        assert response.json()["scheduled"] is True
        assert response.json()["processed"] == 0

        status = client.get("/preload/status").json()
        assert status["is_preloading"] is True
        assert status["preloaded_urls"] == ["v2"]

        cancelled = client.post("/preload/cancel").json()
        assert cancelled["data"] == {"cancelled": True}

        status = client.get("/preload/status").json()
        assert status["is_preloading"] is False
        assert status["preloaded_urls"] == ["v2"]


def test_events_filtered_by_source(client):
    register(client, "a")
    client.post("/preload/batch", json={"urls": ["v1"]})

    events = client.get("/events", params={"source": "preload_cache"}).json()

    assert [e["event_type"] for e in events] == ["preload_warmed"]
