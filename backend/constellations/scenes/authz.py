"""Authorization gate for scene creation and patches.

Editing scene fields requires the ``editScenes`` capability on the scene's
owning handle. Touching ``astropix`` requires the global ``manage-astropix``
role, independently of edit rights. A request is allowed only if every field
it touches is allowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from constellations.directory.handles import Handle, HandleAction, HandleDirectory
from constellations.errors import ConsistencyError
from constellations.models.scene import Scene, SceneField
from constellations.principals import Principal, has_role

MANAGE_ASTROPIX_ROLE = "manage-astropix"

EDIT_FIELDS = frozenset({
    SceneField.TEXT,
    SceneField.OUTGOING_URL,
    SceneField.PLACE,
    SceneField.BACKGROUND,
    SceneField.PUBLISHED,
})


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""


ALLOWED = Decision(True)


class AuthorizationContext:
    """Per-request view of what a principal may do to one scene.

    The owning handle is looked up at most once, the first time an edit
    capability is needed.
    """

    def __init__(self, principal: Principal | None, scene: Scene, handles: HandleDirectory) -> None:
        self.principal = principal
        self.scene = scene
        self._handles = handles
        self._can_edit: bool | None = None

    @property
    def can_edit(self) -> bool:
        if self._can_edit is None:
            owner = self._handles.get(self.scene.handle_id)
            if owner is None:
                raise ConsistencyError(
                    f"Internal database inconsistency: scene {self.scene.id} missing owner {self.scene.handle_id}"
                )
            self._can_edit = self._handles.is_allowed(self.principal, owner, HandleAction.EDIT_SCENES)
        return self._can_edit

    def decide(self, fields: Iterable[SceneField]) -> Decision:
        for f in sorted(set(fields), key=lambda f: f.value):
            if f is SceneField.ASTROPIX:
                if not has_role(self.principal, MANAGE_ASTROPIX_ROLE):
                    return Decision(False, "Modification of astropix data forbidden")
            elif f in EDIT_FIELDS and not self.can_edit:
                return Decision(False, "Forbidden")
        return ALLOWED


def decide(
    principal: Principal | None,
    scene: Scene,
    fields: Iterable[SceneField],
    handles: HandleDirectory,
) -> Decision:
    return AuthorizationContext(principal, scene, handles).decide(fields)


def decide_creation(
    principal: Principal | None,
    handle: Handle,
    handles: HandleDirectory,
    *,
    with_astropix: bool = False,
) -> Decision:
    if not handles.is_allowed(principal, handle, HandleAction.ADD_SCENES):
        return Decision(False, "Forbidden")
    if with_astropix and not has_role(principal, MANAGE_ASTROPIX_ROLE):
        return Decision(False, "Modification of astropix data forbidden")
    return ALLOWED
