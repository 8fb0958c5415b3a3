"""Typed access to the scenes collection."""

from __future__ import annotations

from typing import Any, Callable

from constellations.errors import NotFoundError
from constellations.models.scene import Scene, SceneUpdate
from constellations.storage.documents import DocumentCollection


class SceneStore:
    def __init__(self, collection: DocumentCollection) -> None:
        self.collection = collection

    def get(self, scene_id: str) -> Scene | None:
        doc = self.collection.get(scene_id)
        return Scene.model_validate(doc) if doc is not None else None

    def require(self, scene_id: str) -> Scene:
        scene = self.get(scene_id)
        if scene is None:
            raise NotFoundError(f"scene {scene_id} does not exist")
        return scene

    def insert(self, scene: Scene) -> str:
        return self.collection.insert(scene.to_document())

    def apply(self, scene_id: str, update: SceneUpdate) -> bool:
        return self.collection.update(scene_id, update.set_fields, update.unset_fields)

    def find(
        self,
        predicate: Callable[[dict[str, Any]], bool] | None = None,
        **kwargs: Any,
    ) -> list[Scene]:
        return [Scene.model_validate(d) for d in self.collection.find(predicate, **kwargs)]

    def count(self, predicate: Callable[[dict[str, Any]], bool] | None = None) -> int:
        return self.collection.count(predicate)
