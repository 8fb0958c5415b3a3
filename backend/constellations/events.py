"""Interaction event log: impressions, likes, shares and clicks.

Every logged event is appended as one JSON line to ``events.jsonl`` (kept in
memory when no data directory is configured) and bumps the matching counter on
the scene document. The log is append-only; nothing rewrites it.
"""

from __future__ import annotations

import enum
import json
import logging
import threading
import time
from pathlib import Path
from typing import Any

from constellations.errors import StorageError
from constellations.principals import Principal
from constellations.storage.documents import DocumentCollection

logger = logging.getLogger(__name__)

SHARE_TYPES = ("facebook", "linkedin", "twitter", "email", "copy")


class InteractionKind(str, enum.Enum):
    IMPRESSION = "impression"
    LIKE = "like"
    SHARE = "share"
    CLICK = "click"


_COUNTERS = {
    InteractionKind.IMPRESSION: "impressions",
    InteractionKind.LIKE: "likes",
    InteractionKind.SHARE: "shares",
    InteractionKind.CLICK: "clicks",
}


def is_share_type(value: str) -> bool:
    return value in SHARE_TYPES


class InteractionEvents:
    def __init__(self, scenes: DocumentCollection, log_file: Path | None = None) -> None:
        self._scenes = scenes
        self.log_file = log_file
        self._memory: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)

    def log_impression(self, scene_id: str, principal: Principal | None) -> None:
        self._record(InteractionKind.IMPRESSION, scene_id, principal, 1)

    def log_like(self, scene_id: str, principal: Principal | None, delta: int) -> None:
        self._record(InteractionKind.LIKE, scene_id, principal, delta, delta=delta)

    def log_share(self, scene_id: str, principal: Principal | None, share_type: str) -> None:
        self._record(InteractionKind.SHARE, scene_id, principal, 1, share_type=share_type)

    def log_click(self, scene_id: str, principal: Principal | None) -> None:
        self._record(InteractionKind.CLICK, scene_id, principal, 1)

    def for_scene(self, scene_id: str) -> list[dict[str, Any]]:
        return [e for e in self._load_events() if e.get("scene_id") == scene_id]

    def _record(
        self,
        kind: InteractionKind,
        scene_id: str,
        principal: Principal | None,
        counter_delta: int,
        **extra: Any,
    ) -> None:
        event = {
            "kind": kind.value,
            "scene_id": scene_id,
            "principal": principal.sub if principal is not None else None,
            "date": time.time(),
            **extra,
        }
        self._append(event)
        # Unlikes never push the counter below zero.
        value = self._scenes.increment(scene_id, _COUNTERS[kind], counter_delta, floor=0)
        logger.info("%s event on scene %s (%s now %s)", kind.value, scene_id, _COUNTERS[kind], value)

    def _append(self, event: dict[str, Any]) -> None:
        if self.log_file is None:
            with self._lock:
                self._memory.append(event)
            return
        line = json.dumps(event, ensure_ascii=False) + "\n"
        try:
            with self._lock, open(self.log_file, "a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            logger.error("Appending to %s failed: %s", self.log_file, e)
            raise StorageError(f"write to {self.log_file.name} failed") from e

    def _load_events(self) -> list[dict[str, Any]]:
        if self.log_file is None:
            with self._lock:
                return list(self._memory)
        if not self.log_file.exists():
            return []
        events = []
        with open(self.log_file, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    events.append(json.loads(line))
        return events
