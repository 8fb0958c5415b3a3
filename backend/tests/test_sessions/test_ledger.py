"""Tests for the session interaction ledger."""

from __future__ import annotations

from constellations.sessions import (
    SessionStore,
    has_liked,
    is_valid_session,
    try_add_impression,
    try_add_like,
    try_remove_like,
)
from constellations.storage.documents import DocumentCollection

WINDOW = 3600.0


def test_impression_recorded_once():
    session: dict = {"created": 0.0}
    first = try_add_impression(session, "s1", window_seconds=WINDOW, now=100.0)
    second = try_add_impression(session, "s1", window_seconds=WINDOW, now=200.0)
    assert (first, second) == (True, False)
    assert session["impressions"] == [{"scene_id": "s1", "timestamp": 100.0}]


def test_impressions_are_per_scene():
    session: dict = {}
    assert try_add_impression(session, "s1", window_seconds=WINDOW, now=1.0)
    assert try_add_impression(session, "s2", window_seconds=WINDOW, now=1.0)


def test_impression_counts_again_after_window():
    session: dict = {}
    assert try_add_impression(session, "s1", window_seconds=WINDOW, now=0.0)
    assert not try_add_impression(session, "s1", window_seconds=WINDOW, now=WINDOW - 1)
    assert try_add_impression(session, "s1", window_seconds=WINDOW, now=WINDOW + 1)
    assert len(session["impressions"]) == 1


def test_like_add_is_idempotent():
    session: dict = {}
    assert (try_add_like(session, "s1"), try_add_like(session, "s1")) == (True, False)
    assert has_liked(session, "s1")


def test_like_toggle():
    session: dict = {}
    results = (
        try_add_like(session, "s1"),
        try_remove_like(session, "s1"),
        try_remove_like(session, "s1"),
    )
    assert results == (True, True, False)
    assert not has_liked(session, "s1")


def test_remove_like_keeps_other_scenes():
    session: dict = {}
    try_add_like(session, "s1")
    try_add_like(session, "s2")
    try_remove_like(session, "s1")
    assert session["likes"] == [{"scene_id": "s2"}]


def test_has_liked_without_session():
    assert not has_liked(None, "s1")
    assert not has_liked({}, "s1")


def test_is_valid_session():
    assert is_valid_session({"created": 100.0}, max_age_seconds=50, now=120.0)
    assert not is_valid_session({"created": 100.0}, max_age_seconds=50, now=151.0)
    assert not is_valid_session({}, max_age_seconds=50)
    assert not is_valid_session(None, max_age_seconds=50)
    assert not is_valid_session({"created": "yesterday"}, max_age_seconds=50)


def test_session_store_round_trip():
    store = SessionStore(DocumentCollection("sessions"), max_age_seconds=WINDOW)
    sid, doc = store.open(now=10.0)
    assert doc["created"] == 10.0
    try_add_like(doc, "s1")
    store.save(sid, doc)
    assert has_liked(store.load(sid, now=20.0), "s1")
    assert store.load("unknown", now=20.0) is None


def test_session_store_drops_expired_on_load():
    store = SessionStore(DocumentCollection("sessions"), max_age_seconds=WINDOW)
    sid, _ = store.open(now=0.0)
    assert store.load(sid, now=WINDOW + 1) is None
    assert len(store) == 0


def test_session_store_open_reaps_expired():
    store = SessionStore(DocumentCollection("sessions"), max_age_seconds=WINDOW)
    old, _ = store.open(now=0.0)
    live, _ = store.open(now=WINDOW - 10)
    fresh, _ = store.open(now=WINDOW + 1)

    assert store.load(old, now=WINDOW + 1) is None
    assert store.load(live, now=WINDOW + 1) is not None
    assert store.load(fresh, now=WINDOW + 1) is not None
    assert len(store) == 2


def test_session_store_prune():
    store = SessionStore(DocumentCollection("sessions"), max_age_seconds=WINDOW)
    store.open(now=0.0)
    store.open(now=1.0)
    assert store.prune(now=WINDOW + 5) == 2
    assert store.prune(now=WINDOW + 5) == 0
