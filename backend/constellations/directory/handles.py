"""Handle directory: publishing identities that own scenes."""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from constellations.principals import Principal
from constellations.storage.documents import DocumentCollection


class HandleAction(str, enum.Enum):
    ADD_SCENES = "addScenes"
    EDIT_SCENES = "editScenes"
    VIEW_DASHBOARD = "viewDashboard"
    ADD_IMAGES = "addImages"
    EDIT_SETTINGS = "editSettings"


class Handle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    handle: str
    display_name: str
    owner_accounts: list[str] = Field(default_factory=list)
    creation_date: datetime | None = None


class HandleDirectory:
    def __init__(self, collection: DocumentCollection) -> None:
        self._collection = collection

    def get(self, handle_id: str) -> Handle | None:
        doc = self._collection.get(handle_id)
        return Handle.model_validate(doc) if doc is not None else None

    def find_by_name(self, name: str) -> Handle | None:
        doc = self._collection.find_one(lambda d: d.get("handle") == name)
        return Handle.model_validate(doc) if doc is not None else None

    def is_allowed(self, principal: Principal | None, handle: Handle, action: HandleAction) -> bool:
        # Owners hold every capability on their handle; nobody else holds any.
        if principal is None:
            return False
        return principal.sub in handle.owner_accounts
