"""Scene listings: home timeline, AstroPix summary, handle dashboard."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import TypeAdapter

from constellations.directory.handles import Handle, HandleDirectory
from constellations.errors import ConsistencyError
from constellations.models.responses import PublicScene, SceneInfo
from constellations.scenes.resolver import SceneResolver
from constellations.scenes.store import SceneStore

HOME_TIMELINE_PAGE_SIZE = 8
DASHBOARD_DEFAULT_PAGE_SIZE = 10
DASHBOARD_MAX_PAGE_SIZE = 100

_DATETIME = TypeAdapter(datetime)


def _as_utc(value: Any) -> datetime:
    # Naive timestamps are taken to be UTC so they compare with aware ones
    parsed = _DATETIME.validate_python(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _on_home_timeline(doc: dict[str, Any]) -> bool:
    key = doc.get("home_timeline_sort_key")
    return doc.get("published") is True and isinstance(key, (int, float)) and key >= 0


def home_timeline(
    scenes: SceneStore,
    resolver: SceneResolver,
    page: int,
    session: Mapping[str, Any] | None = None,
) -> list[PublicScene]:
    page_scenes = scenes.find(
        _on_home_timeline,
        sort_key=lambda d: d["home_timeline_sort_key"],
        skip=page * HOME_TIMELINE_PAGE_SIZE,
        limit=HOME_TIMELINE_PAGE_SIZE,
    )
    return [resolver.hydrate(s, session) for s in page_scenes]


def astropix_summary(scenes: SceneStore, handles: HandleDirectory) -> dict[str, dict[str, list[str]]]:
    """``{publisher_id: {image_id: ["@handle", scene_id]}}`` for published scenes."""
    result: dict[str, dict[str, list[str]]] = {}
    handle_names: dict[str, str] = {}

    linked = scenes.find(lambda d: d.get("published") is True and bool(d.get("astropix")))
    for scene in linked:
        if scene.astropix is None:
            continue
        name = handle_names.get(scene.handle_id)
        if name is None:
            owner = handles.get(scene.handle_id)
            if owner is None:
                raise ConsistencyError(
                    f"Internal database inconsistency: scene missing owner {scene.handle_id}"
                )
            name = handle_names[scene.handle_id] = owner.handle

        images = result.setdefault(scene.astropix.publisher_id, {})
        images[scene.astropix.image_id] = ["@" + name, scene.id]

    return result


def handle_scene_info(
    scenes: SceneStore,
    handle: Handle,
    page: int,
    page_size: int,
) -> tuple[int, list[SceneInfo]]:
    """Total scene count for the handle, plus one page of summaries, newest first."""

    def owned(d: dict[str, Any]) -> bool:
        return d.get("handle_id") == handle.id

    total = scenes.count(owned)
    rows = scenes.find(
        owned,
        sort_key=lambda d: _as_utc(d["creation_date"]),
        descending=True,
        skip=page * page_size,
        limit=page_size,
    )
    infos = [
        SceneInfo(
            id=s.id,
            creation_date=s.creation_date,
            impressions=s.impressions,
            likes=s.likes,
            clicks=s.clicks,
            shares=s.shares,
            text=s.text,
            published=s.published,
        )
        for s in rows
    ]
    return total, infos
