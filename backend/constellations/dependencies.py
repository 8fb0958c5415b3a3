"""FastAPI dependency injection."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from fastapi import Depends, Header, HTTPException, Request

from constellations.config import settings
from constellations.principals import Principal
from constellations.services import Services


def get_settings():
    return settings


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_principal(
    authorization: str | None = Header(default=None),
    services: Services = Depends(get_services),
) -> Principal | None:
    """The caller's principal, or None for anonymous requests."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    principal = services.identity.resolve(token.strip()) if scheme.lower() == "bearer" else None
    if principal is None:
        raise HTTPException(status_code=401, detail="Invalid authentication token")
    return principal


def require_principal(principal: Principal | None = Depends(get_principal)) -> Principal:
    if principal is None:
        raise HTTPException(status_code=401, detail="Invalid authentication token")
    return principal


def get_session(
    request: Request,
    services: Services = Depends(get_services),
) -> Iterator[dict[str, Any]]:
    """Load the caller's live session, opening a fresh one if needed, and save it afterwards."""
    sid = request.session.get("sid")
    doc = services.sessions.load(sid) if sid else None
    if doc is None:
        sid, doc = services.sessions.open()
        request.session["sid"] = sid
    yield doc
    services.sessions.save(sid, doc)


def peek_session(
    request: Request,
    services: Services = Depends(get_services),
) -> dict[str, Any] | None:
    """The caller's live session for read-only use; never opens one."""
    sid = request.session.get("sid")
    if not sid:
        return None
    doc = services.sessions.load(sid)
    if doc is None:
        request.session.pop("sid", None)
    return doc
