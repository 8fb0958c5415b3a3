"""API request models for scene creation and patching."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from constellations.models.scene import AstroPixInfo, SceneContent, ScenePlace


class SceneCreation(BaseModel):
    place: ScenePlace
    content: SceneContent
    text: StrictStr
    outgoing_url: StrictStr | None = None
    published: StrictBool | None = Field(None, description="Defaults to true")
    astropix: AstroPixInfo | None = None


class SceneContentPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    background_id: StrictStr | None = None


class ScenePatch(BaseModel):
    """Every field optional; an absent field means "leave unchanged"."""

    model_config = ConfigDict(extra="forbid")

    text: StrictStr | None = None
    outgoing_url: StrictStr | None = None
    place: ScenePlace | None = None
    content: SceneContentPatch | None = None
    published: StrictBool | None = None
    astropix: AstroPixInfo | None = None
