"""Scene content resolution: persisted scene → public representation.

Hydration follows every stored reference (owning handle, image layers,
background). A reference that does not resolve means the database lost
integrity, so it raises ConsistencyError rather than returning a partial
object.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from constellations.directory.handles import HandleDirectory
from constellations.directory.images import Image, ImageStore, image_to_display_json
from constellations.errors import ConsistencyError, NotRepresentableError
from constellations.models.responses import PublicContent, PublicHandle, PublicImageLayer, PublicScene
from constellations.models.scene import Scene
from constellations.sessions import has_liked

R2D = 180.0 / math.pi
R2H = 12.0 / math.pi

# WWT's ZoomLevel is the viewport height in degrees times six. Padding the
# view out by 1.2 over the ROI gives nice spacing: 6 * 1.2 = 7.2.
ZOOM_PER_ROI_DEGREE = 7.2


@dataclass(frozen=True)
class LegacyPlace:
    name: str
    image_id: str
    ra_hours: float
    dec_deg: float
    rotation_deg: float
    zoom_level: float


def to_legacy_place(scene: Scene, name: str) -> LegacyPlace:
    """Project a scene onto a single WWT Place; needs exactly one image layer."""
    layers = scene.content.image_layers or []
    if len(layers) != 1:
        raise NotRepresentableError(f"scene {scene.id} cannot be represented as a WWT Place")

    place = scene.place
    return LegacyPlace(
        name=name,
        image_id=layers[0].image_id,
        ra_hours=place.ra_rad * R2H,
        dec_deg=place.dec_rad * R2D,
        rotation_deg=place.roll_rad * R2D,
        zoom_level=place.roi_height_deg * ZOOM_PER_ROI_DEGREE,
    )


class SceneResolver:
    def __init__(self, handles: HandleDirectory, images: ImageStore, preview_base_url: str) -> None:
        self.handles = handles
        self.images = images
        self.preview_base_url = preview_base_url.rstrip("/")

    def require_image(self, scene: Scene, image_id: str, role: str = "image") -> Image:
        image = self.images.get(image_id)
        if image is None:
            raise ConsistencyError(f"Database consistency failure, scene {scene.id} missing {role} {image_id}")
        return image

    def hydrate(self, scene: Scene, session: Mapping[str, Any] | None = None) -> PublicScene:
        handle = self.handles.get(scene.handle_id)
        if handle is None:
            raise ConsistencyError(
                f"Database consistency failure, scene {scene.id} missing handle {scene.handle_id}"
            )

        content = PublicContent()
        if scene.content.image_layers is not None:
            content.image_layers = [
                PublicImageLayer(
                    image=image_to_display_json(self.require_image(scene, layer.image_id)),
                    opacity=layer.opacity,
                )
                for layer in scene.content.image_layers
            ]

        if scene.content.background_id:
            background = self.require_image(scene, scene.content.background_id, "background")
            content.background = image_to_display_json(background)

        previews = {kind: f"{self.preview_base_url}/{path}" for kind, path in scene.previews.items()}

        return PublicScene(
            id=scene.id,
            handle_id=scene.handle_id,
            handle=PublicHandle(handle=handle.handle, display_name=handle.display_name),
            creation_date=scene.creation_date,
            likes=scene.likes,
            impressions=scene.impressions,
            clicks=scene.clicks,
            shares=scene.shares,
            place=scene.place,
            text=scene.text,
            liked=has_liked(session, scene.id),
            content=content,
            previews=previews,
            published=scene.published,
            outgoing_url=scene.outgoing_url or None,
            astropix=scene.astropix,
        )

    def legacy_place_wtml(self, scene: Scene) -> str:
        from constellations.scenes.wtml import place_to_wtml

        place = to_legacy_place(scene, f"Scene {scene.id}")
        return place_to_wtml(place, self.require_image(scene, place.image_id))
