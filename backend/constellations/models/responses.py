"""API response models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from constellations.models.scene import AstroPixInfo, ScenePlace


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"


class PublicHandle(BaseModel):
    handle: str
    display_name: str


class PublicImageLayer(BaseModel):
    image: dict[str, Any]
    opacity: float


class PublicContent(BaseModel):
    image_layers: list[PublicImageLayer] | None = None
    background: dict[str, Any] | None = None


class PublicScene(BaseModel):
    """Hydrated, client-facing view of a scene.

    Optional parts (``outgoing_url``, ``astropix``, ``content.background``,
    ``content.image_layers``) are dropped from the JSON when unset.
    """

    id: str
    handle_id: str
    handle: PublicHandle
    creation_date: datetime
    likes: int
    impressions: int
    clicks: int
    shares: int
    place: ScenePlace
    text: str
    liked: bool = False
    content: PublicContent = Field(default_factory=PublicContent)
    previews: dict[str, str] = Field(default_factory=dict)
    published: bool
    outgoing_url: str | None = None
    astropix: AstroPixInfo | None = None

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class SceneInfo(BaseModel):
    """Dashboard summary row."""

    id: str = Field(..., serialization_alias="_id")
    creation_date: datetime
    impressions: int
    likes: int
    clicks: int
    shares: int
    text: str
    published: bool
