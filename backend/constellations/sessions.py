"""Session interaction ledger.

A session document looks like::

    {"created": 1700000000.0,
     "impressions": [{"scene_id": "...", "timestamp": 1700000100.0}],
     "likes": [{"scene_id": "..."}]}

The ledger functions only read and mutate a session; creating and expiring
session documents is ``SessionStore``'s business. A
``True`` result from any ``try_*`` function obliges the caller to adjust the
scene's persisted counter exactly once.
"""

from __future__ import annotations

import logging
import time
from typing import Any, MutableMapping

from constellations.storage.documents import DocumentCollection, new_document_id

logger = logging.getLogger(__name__)

SessionData = MutableMapping[str, Any]


def try_add_impression(
    session: SessionData,
    scene_id: str,
    *,
    window_seconds: float,
    now: float | None = None,
) -> bool:
    """Record an impression unless one for this scene is inside the dedup window."""
    now = time.time() if now is None else now
    impressions = session.setdefault("impressions", [])

    # Entries older than the window can never block anything again.
    impressions[:] = [i for i in impressions if now - i.get("timestamp", 0) < window_seconds]

    if any(i.get("scene_id") == scene_id for i in impressions):
        return False

    impressions.append({"scene_id": scene_id, "timestamp": now})
    return True


def has_liked(session: SessionData | None, scene_id: str) -> bool:
    if not session:
        return False
    return any(like.get("scene_id") == scene_id for like in session.get("likes", []))


def try_add_like(session: SessionData, scene_id: str) -> bool:
    if has_liked(session, scene_id):
        return False
    session.setdefault("likes", []).append({"scene_id": scene_id})
    return True


def try_remove_like(session: SessionData, scene_id: str) -> bool:
    if not has_liked(session, scene_id):
        return False
    session["likes"] = [like for like in session["likes"] if like.get("scene_id") != scene_id]
    return True


def is_valid_session(
    session: SessionData | None,
    *,
    max_age_seconds: float,
    now: float | None = None,
) -> bool:
    if not session:
        return False
    created = session.get("created")
    if not isinstance(created, (int, float)):
        return False
    now = time.time() if now is None else now
    return now - created < max_age_seconds


class SessionStore:
    """Server-side session documents, addressed by the id kept in the cookie.

    Only live sessions are ever handed out. An expired document is deleted the
    next time its id is presented, and opening a session reaps every other
    expired one.
    """

    def __init__(self, collection: DocumentCollection, *, max_age_seconds: float) -> None:
        self._collection = collection
        self.max_age_seconds = max_age_seconds

    def open(self, now: float | None = None) -> tuple[str, dict[str, Any]]:
        now = time.time() if now is None else now
        self.prune(now)
        doc: dict[str, Any] = {
            "_id": new_document_id(),
            "created": now,
            "impressions": [],
            "likes": [],
        }
        sid = self._collection.insert(doc)
        logger.debug("Opened session %s", sid)
        return sid, doc

    def load(self, sid: str, now: float | None = None) -> dict[str, Any] | None:
        doc = self._collection.get(sid)
        if doc is None:
            return None
        if not is_valid_session(doc, max_age_seconds=self.max_age_seconds, now=now):
            self._collection.delete(sid)
            logger.debug("Session %s expired", sid)
            return None
        return doc

    def save(self, sid: str, session: SessionData) -> None:
        self._collection.replace(sid, dict(session))

    def prune(self, now: float | None = None) -> int:
        """Delete every expired session document; returns how many went."""
        removed = self._collection.delete_where(
            lambda d: not is_valid_session(d, max_age_seconds=self.max_age_seconds, now=now)
        )
        if removed:
            logger.info("Pruned %d expired session(s)", removed)
        return removed

    def __len__(self) -> int:
        return len(self._collection)
