"""Spatial tessellation lookups: which scenes sit near a given sky position.

A tessellation is a named partition of the sky into cells. Each cell has a
centre, the ids of the scenes inside it and the indices of adjacent cells. The
tables are built elsewhere; here we only walk them.
"""

from __future__ import annotations

import math
from collections import deque

from pydantic import BaseModel, ConfigDict, Field

from constellations.models.scene import ScenePlace
from constellations.storage.documents import DocumentCollection


class TessellationCell(BaseModel):
    ra_rad: float
    dec_rad: float
    scene_ids: list[str] = Field(default_factory=list)
    neighbors: list[int] = Field(default_factory=list)


class Tessellation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(None, alias="_id")
    name: str
    cells: list[TessellationCell] = Field(default_factory=list)


def angular_distance(ra1: float, dec1: float, ra2: float, dec2: float) -> float:
    """Great-circle separation in radians (haversine form)."""
    sin_ddec = math.sin((dec2 - dec1) / 2)
    sin_dra = math.sin((ra2 - ra1) / 2)
    h = sin_ddec**2 + math.cos(dec1) * math.cos(dec2) * sin_dra**2
    return 2 * math.asin(min(1.0, math.sqrt(h)))


class TessellationService:
    def __init__(self, collection: DocumentCollection) -> None:
        self._collection = collection

    def get(self, name: str) -> Tessellation | None:
        doc = self._collection.find_one(lambda d: d.get("name") == name)
        return Tessellation.model_validate(doc) if doc is not None else None

    def nearby_scene_ids(
        self,
        scene_id: str,
        place: ScenePlace,
        tessellation: Tessellation,
        limit: int,
    ) -> list[str]:
        """Up to ``limit`` scene ids, nearest cells first, excluding ``scene_id``."""
        if limit <= 0 or not tessellation.cells:
            return []

        def dist(index: int) -> float:
            cell = tessellation.cells[index]
            return angular_distance(place.ra_rad, place.dec_rad, cell.ra_rad, cell.dec_rad)

        home = min(range(len(tessellation.cells)), key=dist)

        # Breadth-first over cell adjacency; within a ring, closer cells first.
        result: list[str] = []
        seen_cells = {home}
        ring = [home]
        while ring and len(result) < limit:
            next_ring: list[int] = []
            for index in sorted(ring, key=dist):
                for sid in tessellation.cells[index].scene_ids:
                    if sid != scene_id and sid not in result:
                        result.append(sid)
                        if len(result) == limit:
                            return result
                for neighbor in tessellation.cells[index].neighbors:
                    if 0 <= neighbor < len(tessellation.cells) and neighbor not in seen_cells:
                        seen_cells.add(neighbor)
                        next_ring.append(neighbor)
            ring = next_ring
        return result
