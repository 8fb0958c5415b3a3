"""Scene mutation engine: create and patch as all-or-nothing operations.

Both operations finish every check (schema, ranges, references, permissions)
before issuing their one write. Preview regeneration is never done inline; the
engine queues a job on the outbox and the caller schedules delivery.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from constellations.directory.handles import HandleDirectory
from constellations.directory.images import ImageStore
from constellations.errors import ForbiddenError, NotFoundError
from constellations.models.scene import Scene, SceneField
from constellations.previews import PreviewJob, PreviewOutbox
from constellations.principals import Principal
from constellations.scenes.authz import AuthorizationContext, decide_creation
from constellations.scenes.store import SceneStore
from constellations.scenes.validation import validate_creation, validate_patch
from constellations.storage.documents import new_document_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreatedScene:
    id: str
    rel_url: str


@dataclass(frozen=True)
class PatchResult:
    touched: frozenset[SceneField]
    preview_requested: bool


class SceneEngine:
    def __init__(
        self,
        scenes: SceneStore,
        handles: HandleDirectory,
        images: ImageStore,
        outbox: PreviewOutbox,
    ) -> None:
        self.scenes = scenes
        self.handles = handles
        self.images = images
        self.outbox = outbox

    def create(self, principal: Principal | None, handle_name: str, payload: Any) -> CreatedScene:
        handle = self.handles.find_by_name(handle_name)
        if handle is None:
            raise NotFoundError("Handle not found")

        creation = validate_creation(payload, self.images)

        decision = decide_creation(
            principal, handle, self.handles, with_astropix=creation.astropix is not None
        )
        if not decision.allowed:
            raise ForbiddenError(decision.reason)

        scene = Scene(
            _id=new_document_id(),
            handle_id=handle.id,
            creation_date=datetime.now(timezone.utc),
            place=creation.place,
            content=creation.content,
            text=creation.text,
            outgoing_url=creation.outgoing_url or None,
            published=True if creation.published is None else creation.published,
            astropix=creation.astropix,
        )

        scene_id = self.scenes.insert(scene)
        logger.info("Created scene %s under @%s", scene_id, handle.handle)

        self.outbox.enqueue(PreviewJob(scene_id=scene_id, reason="created"))
        return CreatedScene(id=scene_id, rel_url="/scene/" + quote(scene_id, safe=""))

    def patch(self, principal: Principal | None, scene_id: str, payload: Any) -> PatchResult:
        validated = validate_patch(payload, self.images)
        scene = self.scenes.require(scene_id)

        decision = AuthorizationContext(principal, scene, self.handles).decide(validated.touched)
        if not decision.allowed:
            raise ForbiddenError(decision.reason)

        if validated.update.is_empty:
            return PatchResult(touched=frozenset(), preview_requested=False)

        if not self.scenes.apply(scene.id, validated.update):
            raise NotFoundError(f"scene {scene_id} does not exist")

        logger.info(
            "Patched scene %s: %s", scene.id, ", ".join(sorted(f.value for f in validated.touched))
        )

        if validated.refreshes_preview:
            self.outbox.enqueue(PreviewJob(scene_id=scene.id, reason="updated"))

        return PatchResult(
            touched=frozenset(validated.touched),
            preview_requested=validated.refreshes_preview,
        )
