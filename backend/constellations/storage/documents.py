"""Document collections: one aggregate per document, one write per mutation.

Each collection keeps its documents in memory, keyed by ``_id``. When a data
directory is configured the whole collection is mirrored to
``<data_dir>/<name>.json`` after every write; the in-memory state only changes
once the file write succeeded, so a failed write leaves nothing behind.

Dotted paths (``content.background_id``) address nested fields in updates.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import threading
import uuid
from pathlib import Path
from typing import Any, Callable, Iterable

from constellations.errors import StorageError

logger = logging.getLogger(__name__)

Document = dict[str, Any]
Predicate = Callable[[Document], bool]


def new_document_id() -> str:
    """Opaque 24-hex-digit identifier, the same width as a Mongo ObjectId."""
    return uuid.uuid4().hex[:24]


def _set_path(doc: Document, path: str, value: Any) -> None:
    *parents, leaf = path.split(".")
    target = doc
    for key in parents:
        child = target.get(key)
        if not isinstance(child, dict):
            child = {}
            target[key] = child
        target = child
    target[leaf] = value


def _unset_path(doc: Document, path: str) -> None:
    *parents, leaf = path.split(".")
    target: Any = doc
    for key in parents:
        target = target.get(key)
        if not isinstance(target, dict):
            return
    target.pop(leaf, None)


class DocumentCollection:
    """A named set of JSON documents with atomic single-document writes."""

    def __init__(self, name: str, data_dir: Path | None = None) -> None:
        self.name = name
        self._docs: dict[str, Document] = {}
        self._lock = threading.RLock()
        self._file = data_dir / f"{name}.json" if data_dir is not None else None
        if self._file is not None:
            self._file.parent.mkdir(parents=True, exist_ok=True)
            self._load()

    # ── Reads ────────────────────────────────────────────────────────────

    def get(self, doc_id: str) -> Document | None:
        with self._lock:
            doc = self._docs.get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def find_one(self, predicate: Predicate) -> Document | None:
        with self._lock:
            for doc in self._docs.values():
                if predicate(doc):
                    return copy.deepcopy(doc)
        return None

    def find(
        self,
        predicate: Predicate | None = None,
        *,
        sort_key: Callable[[Document], Any] | None = None,
        descending: bool = False,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Document]:
        with self._lock:
            docs = [d for d in self._docs.values() if predicate is None or predicate(d)]
            if sort_key is not None:
                docs.sort(key=sort_key, reverse=descending)
            end = None if limit is None else skip + limit
            return [copy.deepcopy(d) for d in docs[skip:end]]

    def count(self, predicate: Predicate | None = None) -> int:
        with self._lock:
            return sum(1 for d in self._docs.values() if predicate is None or predicate(d))

    # ── Writes ───────────────────────────────────────────────────────────

    def insert(self, doc: Document) -> str:
        with self._lock:
            doc = copy.deepcopy(doc)
            doc_id = doc.setdefault("_id", new_document_id())
            if doc_id in self._docs:
                raise StorageError(f"duplicate _id {doc_id} in {self.name}")
            self._commit(doc_id, doc)
            return doc_id

    def replace(self, doc_id: str, doc: Document) -> None:
        with self._lock:
            doc = copy.deepcopy(doc)
            doc["_id"] = doc_id
            self._commit(doc_id, doc)

    def update(
        self,
        doc_id: str,
        set_fields: dict[str, Any] | None = None,
        unset_fields: Iterable[str] = (),
    ) -> bool:
        """Apply a set-map and an unset-map to one document in a single write.

        Returns False if the document does not exist.
        """
        with self._lock:
            current = self._docs.get(doc_id)
            if current is None:
                return False
            updated = copy.deepcopy(current)
            for path, value in (set_fields or {}).items():
                _set_path(updated, path, copy.deepcopy(value))
            for path in unset_fields:
                _unset_path(updated, path)
            self._commit(doc_id, updated)
            return True

    def increment(
        self,
        doc_id: str,
        field: str,
        delta: int,
        *,
        floor: int | None = None,
    ) -> int | None:
        """Add ``delta`` to a numeric top-level field; returns the new value."""
        with self._lock:
            current = self._docs.get(doc_id)
            if current is None:
                return None
            value = (current.get(field) or 0) + delta
            if floor is not None and value < floor:
                value = floor
            updated = dict(current)
            updated[field] = value
            self._commit(doc_id, updated)
            return value

    def delete(self, doc_id: str) -> bool:
        with self._lock:
            if doc_id not in self._docs:
                return False
            self._drop([doc_id])
            return True

    def delete_where(self, predicate: Predicate) -> int:
        """Remove every matching document in a single write; returns how many."""
        with self._lock:
            doomed = [doc_id for doc_id, doc in self._docs.items() if predicate(doc)]
            if doomed:
                self._drop(doomed)
            return len(doomed)

    # ── Persistence ──────────────────────────────────────────────────────

    def _commit(self, doc_id: str, doc: Document) -> None:
        previous = self._docs.get(doc_id)
        self._docs[doc_id] = doc
        try:
            self._flush()
        except OSError as e:
            if previous is None:
                del self._docs[doc_id]
            else:
                self._docs[doc_id] = previous
            logger.error("Write to collection %s failed: %s", self.name, e)
            raise StorageError(f"write to {self.name} failed") from e

    def _drop(self, doc_ids: list[str]) -> None:
        removed = {doc_id: self._docs.pop(doc_id) for doc_id in doc_ids}
        try:
            self._flush()
        except OSError as e:
            self._docs.update(removed)
            logger.error("Delete from collection %s failed: %s", self.name, e)
            raise StorageError(f"write to {self.name} failed") from e

    def _flush(self) -> None:
        if self._file is None:
            return
        tmp = self._file.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(list(self._docs.values()), f, indent=2, ensure_ascii=False, default=str)
        os.replace(tmp, self._file)

    def _load(self) -> None:
        if self._file is None or not self._file.exists():
            return
        with open(self._file, encoding="utf-8") as f:
            data = json.load(f)
        for doc in data:
            self._docs[doc["_id"]] = doc
        logger.info("Loaded %d documents into %s", len(self._docs), self.name)

    def __len__(self) -> int:
        return self.count()
