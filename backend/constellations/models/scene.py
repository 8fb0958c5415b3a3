"""Persisted scene aggregate and its parts."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictStr


class ScenePlace(BaseModel):
    """Sky position of a scene. Angles in radians, ROI height in degrees."""

    ra_rad: StrictFloat
    dec_rad: StrictFloat
    roll_rad: StrictFloat
    roi_height_deg: StrictFloat
    roi_aspect_ratio: StrictFloat


class ImageLayer(BaseModel):
    image_id: StrictStr
    opacity: StrictFloat = Field(..., ge=0.0, le=1.0)


class SceneContent(BaseModel):
    background_id: StrictStr | None = None
    image_layers: list[ImageLayer] | None = None


class AstroPixInfo(BaseModel):
    publisher_id: StrictStr
    image_id: StrictStr


class SceneField(str, enum.Enum):
    """Fields a scene patch can touch."""

    TEXT = "text"
    OUTGOING_URL = "outgoing_url"
    PLACE = "place"
    BACKGROUND = "content.background_id"
    PUBLISHED = "published"
    ASTROPIX = "astropix"


class Scene(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    handle_id: str
    creation_date: datetime

    impressions: int = 0
    likes: int = 0
    clicks: int = 0
    shares: int = 0

    place: ScenePlace
    content: SceneContent
    previews: dict[str, str] = Field(default_factory=dict)
    outgoing_url: str | None = None
    text: str

    published: bool = True
    home_timeline_sort_key: float | None = None
    astropix: AstroPixInfo | None = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass
class SceneUpdate:
    """A single-document write: dotted-path sets plus unsets."""

    set_fields: dict[str, Any] = field(default_factory=dict)
    unset_fields: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.set_fields and not self.unset_fields
