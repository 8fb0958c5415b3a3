"""Image store: display metadata and WWT imageset parameters for image ids."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from constellations.storage.documents import DocumentCollection


class ImageWwt(BaseModel):
    base_degrees_per_tile: float
    bottoms_up: bool = False
    center_x: float
    center_y: float
    file_type: str = ".png"
    offset_x: float = 0.0
    offset_y: float = 0.0
    projection: str = "Tan"
    quad_tree_map: str = ""
    rotation: float = 0.0
    tile_levels: int = 0
    width_factor: int = 2
    thumbnail_url: str = ""


class ImageStorage(BaseModel):
    legacy_url_template: str | None = None


class ImagePermissions(BaseModel):
    copyright: str = ""
    credits: str | None = None
    license: str = ""


class Image(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    handle_id: str
    creation_date: datetime | None = None
    note: str = ""
    wwt: ImageWwt
    storage: ImageStorage = Field(default_factory=ImageStorage)
    permissions: ImagePermissions = Field(default_factory=ImagePermissions)


class ImageStore:
    def __init__(self, collection: DocumentCollection) -> None:
        self._collection = collection

    def get(self, image_id: str) -> Image | None:
        doc = self._collection.get(image_id)
        return Image.model_validate(doc) if doc is not None else None

    def exists(self, image_id: str) -> bool:
        return self._collection.get(image_id) is not None


def image_to_display_json(image: Image) -> dict[str, Any]:
    """Client-facing description of an image, as embedded in hydrated scenes."""
    return {
        "id": image.id,
        "wwt": image.wwt.model_dump(),
        "permissions": image.permissions.model_dump(exclude_none=True),
        "storage": image.storage.model_dump(exclude_none=True),
    }
