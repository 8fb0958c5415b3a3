"""Scene payload validation.

Decoding is done with pydantic; range and length rules that the models cannot
express are checked here, and image references are resolved against the image
store. Nothing in this module writes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from constellations.directory.images import ImageStore
from constellations.errors import InvalidReferenceError, SchemaError
from constellations.models.requests import SceneCreation, ScenePatch
from constellations.models.scene import SceneField, ScenePlace, SceneUpdate

MAX_TEXT_LENGTH = 5000

# (field, low, high), inclusive
_PLACE_BOUNDS = (
    ("ra_rad", 0.0, 2 * math.pi),
    ("dec_rad", -0.5 * math.pi, 0.5 * math.pi),
    ("roll_rad", -math.pi, math.pi),
    ("roi_height_deg", 0.0, 360.0),
    ("roi_aspect_ratio", 0.1, 10.0),
)

_PREVIEW_FIELDS = frozenset({SceneField.PLACE, SceneField.BACKGROUND})


def format_validation_error(err: ValidationError) -> str:
    """One ``path: message`` line per problem."""
    lines = []
    for e in err.errors():
        path = ".".join(str(p) for p in e["loc"]) or "<root>"
        lines.append(f"{path}: {e['msg']}")
    return "\n".join(lines)


def _decode(model: type[BaseModel], payload: Any) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise SchemaError(f"Submission did not match schema: {format_validation_error(e)}") from e


def check_place(place: ScenePlace) -> None:
    # Written as "not inside" so NaN fails too
    bad = [name for name, lo, hi in _PLACE_BOUNDS if not lo <= getattr(place, name) <= hi]
    if bad:
        raise SchemaError(f"Invalid input `place`: out of range: {', '.join(bad)}")


def check_length(name: str, value: str) -> None:
    if len(value) > MAX_TEXT_LENGTH:
        raise SchemaError(f"Invalid input `{name}`: too long")


# ── Creation ─────────────────────────────────────────────────────────────


def validate_creation(payload: Any, images: ImageStore) -> SceneCreation:
    creation: SceneCreation = _decode(SceneCreation, payload)

    check_place(creation.place)
    check_length("text", creation.text)
    if creation.outgoing_url is not None:
        check_length("outgoing_url", creation.outgoing_url)

    layers = creation.content.image_layers
    if not layers:
        raise SchemaError("Invalid scene content: no image layers")

    for layer in layers:
        if not images.exists(layer.image_id):
            raise InvalidReferenceError(f"Required image {layer.image_id} not found")

    if creation.content.background_id is not None and not images.exists(creation.content.background_id):
        raise InvalidReferenceError(f"Required image {creation.content.background_id} not found")

    if creation.astropix is not None:
        check_astropix_pair(creation.astropix.publisher_id, creation.astropix.image_id, allow_clear=False)

    return creation


def check_astropix_pair(publisher_id: str, image_id: str, *, allow_clear: bool) -> bool:
    """True if the pair is a removal request (both empty)."""
    if publisher_id and image_id:
        return False
    if allow_clear and not publisher_id and not image_id:
        return True
    raise SchemaError("Invalid input `astropix`: both publisher and image IDs must be defined")


# ── Patch ────────────────────────────────────────────────────────────────


@dataclass
class ValidatedPatch:
    update: SceneUpdate = field(default_factory=SceneUpdate)
    touched: set[SceneField] = field(default_factory=set)

    @property
    def refreshes_preview(self) -> bool:
        return bool(self.touched & _PREVIEW_FIELDS)


def validate_patch(payload: Any, images: ImageStore) -> ValidatedPatch:
    """Decode and fully check a patch, producing the single write it implies."""
    patch: ScenePatch = _decode(ScenePatch, payload)
    result = ValidatedPatch()
    sets = result.update.set_fields
    unsets = result.update.unset_fields

    if patch.text is not None:
        check_length("text", patch.text)
        sets["text"] = patch.text
        result.touched.add(SceneField.TEXT)

    if patch.outgoing_url is not None:
        check_length("outgoing_url", patch.outgoing_url)
        if patch.outgoing_url:
            sets["outgoing_url"] = patch.outgoing_url
        else:
            unsets.append("outgoing_url")
        result.touched.add(SceneField.OUTGOING_URL)

    if patch.place is not None:
        check_place(patch.place)
        sets["place"] = patch.place.model_dump()
        result.touched.add(SceneField.PLACE)

    if patch.content is not None and patch.content.background_id is not None:
        if not images.exists(patch.content.background_id):
            raise InvalidReferenceError("Invalid input `content.background_id`: not an image ID")
        sets["content.background_id"] = patch.content.background_id
        result.touched.add(SceneField.BACKGROUND)

    if patch.published is not None:
        sets["published"] = patch.published
        result.touched.add(SceneField.PUBLISHED)

    if patch.astropix is not None:
        if check_astropix_pair(patch.astropix.publisher_id, patch.astropix.image_id, allow_clear=True):
            unsets.append("astropix")
        else:
            sets["astropix"] = patch.astropix.model_dump()
        result.touched.add(SceneField.ASTROPIX)

    return result
