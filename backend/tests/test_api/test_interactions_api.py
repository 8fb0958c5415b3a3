"""Tests for impressions, likes, shares and click-throughs over HTTP."""

from __future__ import annotations

import pytest

from constellations.events import SHARE_TYPES
from tests.conftest import auth, scene_doc


def _counters(services, scene_id):
    scene = services.scenes.require(scene_id)
    return {"impressions": scene.impressions, "likes": scene.likes, "shares": scene.shares, "clicks": scene.clicks}


def test_impression_counted_once_per_session(client, services, scene_id):
    first = client.post(f"/scene/{scene_id}/impressions")
    assert first.status_code == 200
    assert first.json() == {"error": False, "id": scene_id, "success": True}

    second = client.post(f"/scene/{scene_id}/impressions")
    assert second.json()["success"] is False
    assert _counters(services, scene_id)["impressions"] == 1


def test_impression_per_session(client, services, scene_id):
    client.post(f"/scene/{scene_id}/impressions")
    client.cookies.clear()
    client.post(f"/scene/{scene_id}/impressions")
    assert _counters(services, scene_id)["impressions"] == 2


def test_like_toggle(client, services, scene_id):
    assert client.post(f"/scene/{scene_id}/likes").json()["success"] is True
    assert client.post(f"/scene/{scene_id}/likes").json()["success"] is False
    assert _counters(services, scene_id)["likes"] == 1
    assert client.get(f"/scene/{scene_id}").json()["liked"] is True

    assert client.delete(f"/scene/{scene_id}/likes").json()["success"] is True
    assert client.delete(f"/scene/{scene_id}/likes").json()["success"] is False
    assert _counters(services, scene_id)["likes"] == 0
    assert client.get(f"/scene/{scene_id}").json()["liked"] is False


def test_like_unknown_scene(client):
    response = client.post("/scene/" + "f" * 24 + "/likes")
    assert response.status_code == 404


@pytest.mark.parametrize("share_type", SHARE_TYPES)
def test_share_counted(client, services, scene_id, share_type):
    response = client.post(f"/scene/{scene_id}/shares/{share_type}")
    assert response.json()["success"] is True
    client.post(f"/scene/{scene_id}/shares/{share_type}")
    assert _counters(services, scene_id)["shares"] == 2


def test_share_invalid_type(client, services, scene_id):
    response = client.post(f"/scene/{scene_id}/shares/myspace")
    assert response.status_code == 400
    assert response.json()["message"] == "myspace is not a valid scene sharing type"
    assert _counters(services, scene_id)["shares"] == 0


def test_click_redirects(client, services):
    services.collections["scenes"].insert(scene_doc("c4" * 12, outgoing_url="https://example.org/more"))
    response = client.get(f"/scene/{'c4' * 12}/click", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "https://example.org/more"
    assert _counters(services, "c4" * 12)["clicks"] == 1


def test_click_without_url(client, services, scene_id):
    response = client.get(f"/scene/{scene_id}/click", follow_redirects=False)
    assert response.status_code == 404
    assert _counters(services, scene_id)["clicks"] == 0


def test_interactions_record_principal(client, services, scene_id):
    client.post(f"/scene/{scene_id}/impressions", headers=auth("owner-token"))
    events = services.events.for_scene(scene_id)
    assert events[0]["principal"] == "owner-account"


def test_counters_untouched_by_patch(client, services, scene_id):
    client.post(f"/scene/{scene_id}/likes")
    client.patch(f"/scene/{scene_id}", json={"text": "edited"}, headers=auth("owner-token"))
    assert _counters(services, scene_id)["likes"] == 1


def _age_sessions(services, seconds):
    sessions = services.collections["sessions"]
    for doc in sessions.find():
        sessions.update(doc["_id"], {"created": doc["created"] - seconds})


def test_expired_session_is_replaced(client, services, scene_id):
    assert client.post(f"/scene/{scene_id}/shares/email").json()["success"] is True
    _age_sessions(services, services.settings.session_max_age_seconds + 60)

    results = [client.post(f"/scene/{scene_id}/shares/email").json()["success"] for _ in range(3)]
    assert results == [True, True, True]
    assert _counters(services, scene_id)["shares"] == 4
    assert services.collections["sessions"].count() == 1


def test_expired_session_forgets_likes(client, services, scene_id):
    client.post(f"/scene/{scene_id}/likes")
    _age_sessions(services, services.settings.session_max_age_seconds + 60)

    assert client.get(f"/scene/{scene_id}").json()["liked"] is False
    assert services.collections["sessions"].count() == 0


def test_anonymous_reads_open_no_sessions(client, services, scene_id):
    for _ in range(20):
        assert client.get(f"/scene/{scene_id}").status_code == 200
    client.get("/scenes/home-timeline")
    assert services.collections["sessions"].count() == 0


def test_new_session_reaps_expired_ones(client, services, scene_id):
    client.post(f"/scene/{scene_id}/impressions")
    client.cookies.clear()
    client.post(f"/scene/{scene_id}/impressions")
    _age_sessions(services, services.settings.session_max_age_seconds + 60)

    client.cookies.clear()
    client.post(f"/scene/{scene_id}/impressions")
    assert services.collections["sessions"].count() == 1
