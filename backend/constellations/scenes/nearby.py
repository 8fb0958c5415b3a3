"""Nearby-scene queries over a named tessellation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from constellations.directory.tessellation import TessellationService
from constellations.errors import NotFoundError, SchemaError
from constellations.models.responses import PublicScene
from constellations.scenes.resolver import SceneResolver
from constellations.scenes.store import SceneStore

GLOBAL_TESSELLATION = "global"


def nearby_scenes(
    scene_id: str,
    tessellation_name: str,
    limit: int,
    *,
    scenes: SceneStore,
    tessellations: TessellationService,
    resolver: SceneResolver,
    session: Mapping[str, Any] | None = None,
) -> list[PublicScene]:
    if limit <= 0:
        raise SchemaError("invalid size")

    scene = scenes.require(scene_id)

    tessellation = tessellations.get(tessellation_name)
    if tessellation is None:
        raise NotFoundError(f"error finding {tessellation_name} tessellation")

    ids = tessellations.nearby_scene_ids(scene.id, scene.place, tessellation, limit)

    results = []
    for sid in ids:
        neighbor = scenes.get(sid)
        # Tables are rebuilt out of band and may still list deleted scenes
        if neighbor is not None:
            results.append(resolver.hydrate(neighbor, session))
    return results
