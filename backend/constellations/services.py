"""Service container: collections, collaborators and the scene engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import httpx

from constellations.config import Settings
from constellations.directory.handles import HandleDirectory
from constellations.directory.images import ImageStore
from constellations.directory.tessellation import TessellationService
from constellations.events import InteractionEvents
from constellations.previews import PreviewDispatcher, PreviewOutbox
from constellations.principals import StaticIdentityProvider
from constellations.scenes.engine import SceneEngine
from constellations.scenes.resolver import SceneResolver
from constellations.scenes.store import SceneStore
from constellations.sessions import SessionStore
from constellations.storage.documents import DocumentCollection

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    scenes: SceneStore
    handles: HandleDirectory
    images: ImageStore
    tessellations: TessellationService
    sessions: SessionStore
    events: InteractionEvents
    identity: StaticIdentityProvider
    outbox: PreviewOutbox
    dispatcher: PreviewDispatcher
    resolver: SceneResolver
    engine: SceneEngine
    collections: dict[str, DocumentCollection]


def build_services(
    settings: Settings,
    *,
    preview_transport: httpx.AsyncBaseTransport | None = None,
) -> Services:
    data_dir = Path(settings.data_dir) if settings.data_dir else None
    collections = {
        name: DocumentCollection(name, data_dir)
        for name in ("scenes", "handles", "images", "tessellations", "sessions")
    }
    if data_dir is None:
        logger.warning("No data_dir configured; documents are kept in memory only")

    if settings.identity_tokens_file:
        identity = StaticIdentityProvider.from_file(Path(settings.identity_tokens_file))
    else:
        identity = StaticIdentityProvider()

    scenes = SceneStore(collections["scenes"])
    handles = HandleDirectory(collections["handles"])
    images = ImageStore(collections["images"])
    outbox = PreviewOutbox()

    return Services(
        settings=settings,
        scenes=scenes,
        handles=handles,
        images=images,
        tessellations=TessellationService(collections["tessellations"]),
        sessions=SessionStore(
            collections["sessions"], max_age_seconds=settings.session_max_age_seconds
        ),
        events=InteractionEvents(
            collections["scenes"], data_dir / "events.jsonl" if data_dir is not None else None
        ),
        identity=identity,
        outbox=outbox,
        dispatcher=PreviewDispatcher(
            outbox,
            settings.previewer_url,
            timeout=settings.preview_timeout_seconds,
            transport=preview_transport,
        ),
        resolver=SceneResolver(handles, images, settings.preview_base_url),
        engine=SceneEngine(scenes, handles, images, outbox),
        collections=collections,
    )
