"""Shared test fixtures."""

from __future__ import annotations

import math

import httpx
import pytest
from fastapi.testclient import TestClient

from constellations.config import Settings
from constellations.main import create_app
from constellations.principals import Principal
from constellations.services import Services, build_services


OWNER = Principal(sub="owner-account")
STRANGER = Principal(sub="stranger-account")
CURATOR = Principal(sub="curator-account", roles=frozenset({"manage-astropix"}))

TOKENS = {
    "owner-token": OWNER,
    "stranger-token": STRANGER,
    "curator-token": CURATOR,
}

HANDLE_ID = "a1" * 12
IMAGE_ID = "b1" * 12
IMAGE2_ID = "b2" * 12
BACKGROUND_ID = "b3" * 12

PLACE = {
    "ra_rad": 1.0,
    "dec_rad": 0.5,
    "roll_rad": 0.25,
    "roi_height_deg": 10.0,
    "roi_aspect_ratio": 1.5,
}


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def image_doc(image_id: str) -> dict:
    return {
        "_id": image_id,
        "handle_id": HANDLE_ID,
        "creation_date": "2024-01-01T00:00:00Z",
        "wwt": {
            "base_degrees_per_tile": 0.1,
            "bottoms_up": False,
            "center_x": 10.0,
            "center_y": 20.0,
            "file_type": ".png",
            "offset_x": 5.0,
            "offset_y": 5.0,
            "projection": "Tan",
            "quad_tree_map": "",
            "rotation": 0.0,
            "tile_levels": 3,
            "width_factor": 2,
            "thumbnail_url": f"https://example.org/{image_id}/thumb.jpg",
        },
        "storage": {"legacy_url_template": f"https://example.org/{image_id}/{{1}}/{{3}}/{{3}}_{{2}}.png"},
        "permissions": {"copyright": "© Someone", "credits": "Someone", "license": "CC-BY-4.0"},
    }


def scene_doc(scene_id: str, **overrides) -> dict:
    doc = {
        "_id": scene_id,
        "handle_id": HANDLE_ID,
        "creation_date": "2024-02-01T00:00:00Z",
        "impressions": 0,
        "likes": 0,
        "clicks": 0,
        "shares": 0,
        "place": dict(PLACE),
        "content": {"image_layers": [{"image_id": IMAGE_ID, "opacity": 1.0}]},
        "previews": {},
        "text": f"scene {scene_id}",
        "published": True,
    }
    doc.update(overrides)
    return doc


class RecordingPreviewer:
    """httpx transport standing in for the preview service."""

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={"ok": self.status_code == 200})

    @property
    def scene_ids(self) -> list[str]:
        return [r.url.path.rsplit("/", 1)[-1] for r in self.requests]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        previewer_url="http://previewer.test",
        preview_base_url="https://previews.example.org",
        data_dir="",
        identity_tokens_file="",
    )


@pytest.fixture
def previewer() -> RecordingPreviewer:
    return RecordingPreviewer()


@pytest.fixture
def services(settings: Settings, previewer: RecordingPreviewer) -> Services:
    svc = build_services(settings, preview_transport=previewer.transport)
    for token, principal in TOKENS.items():
        svc.identity.add(token, principal)

    svc.collections["handles"].insert({
        "_id": HANDLE_ID,
        "handle": "stellar",
        "display_name": "Stellar Scenes",
        "owner_accounts": [OWNER.sub],
    })
    for image_id in (IMAGE_ID, IMAGE2_ID, BACKGROUND_ID):
        svc.collections["images"].insert(image_doc(image_id))
    return svc


@pytest.fixture
def client(services: Services) -> TestClient:
    return TestClient(create_app(services))


@pytest.fixture
def scene_id(services: Services) -> str:
    return services.collections["scenes"].insert(scene_doc("c1" * 12))


@pytest.fixture
def full_sky_place() -> dict:
    return {
        "ra_rad": 2 * math.pi,
        "dec_rad": -0.5 * math.pi,
        "roll_rad": math.pi,
        "roi_height_deg": 360.0,
        "roi_aspect_ratio": 10.0,
    }
