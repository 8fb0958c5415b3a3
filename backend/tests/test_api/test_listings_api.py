"""Tests for home timeline, AstroPix summary and handle dashboard endpoints."""

from __future__ import annotations

from tests.conftest import auth, scene_doc


def test_home_timeline_hides_unpublished(client, services):
    services.collections["scenes"].insert(scene_doc("e1" * 12, home_timeline_sort_key=1.0))
    services.collections["scenes"].insert(scene_doc("e2" * 12, home_timeline_sort_key=0.0, published=False))

    response = client.get("/scenes/home-timeline")
    assert response.status_code == 200
    assert [s["id"] for s in response.json()["results"]] == ["e1" * 12]


def test_home_timeline_bad_page_means_first(client, services):
    services.collections["scenes"].insert(scene_doc("e1" * 12, home_timeline_sort_key=1.0))
    for page in ("-1", "abc"):
        results = client.get("/scenes/home-timeline", params={"page": page}).json()["results"]
        assert len(results) == 1
    assert client.get("/scenes/home-timeline", params={"page": "1"}).json()["results"] == []


def test_astropix_summary(client, services):
    services.collections["scenes"].insert(
        scene_doc("e1" * 12, astropix={"publisher_id": "nasa", "image_id": "PIA001"})
    )
    response = client.get("/scenes/astropix-summary")
    assert response.json() == {"error": False, "result": {"nasa": {"PIA001": ["@stellar", "e1" * 12]}}}


def test_dashboard_for_owner(client, services):
    for i in range(3):
        services.collections["scenes"].insert(
            scene_doc(f"{i:024x}", creation_date=f"2024-03-0{i + 1}T00:00:00Z")
        )

    response = client.get("/handle/stellar/sceneinfo", params={"pagesize": "2"}, headers=auth("owner-token"))
    assert response.status_code == 200
    data = response.json()
    assert data["total_count"] == 3
    assert [r["_id"] for r in data["results"]] == [f"{2:024x}", f"{1:024x}"]
    assert set(data["results"][0]) == {
        "_id", "creation_date", "impressions", "likes", "clicks", "shares", "text", "published",
    }


def test_dashboard_page_size_fallback(client, services):
    for i in range(12):
        services.collections["scenes"].insert(scene_doc(f"{i:024x}"))
    for pagesize in ("0", "500", "lots"):
        response = client.get(
            "/handle/stellar/sceneinfo", params={"pagesize": pagesize}, headers=auth("owner-token")
        )
        assert len(response.json()["results"]) == 10


def test_dashboard_forbidden(client):
    assert client.get("/handle/stellar/sceneinfo", headers=auth("stranger-token")).status_code == 403
    assert client.get("/handle/stellar/sceneinfo").status_code == 403


def test_dashboard_unknown_handle(client):
    assert client.get("/handle/nobody/sceneinfo", headers=auth("owner-token")).status_code == 404
