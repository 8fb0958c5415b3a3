"""Interaction endpoints: clicks, impressions, likes, shares."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from constellations.dependencies import get_principal, get_services, get_session
from constellations.errors import NotFoundError
from constellations.events import is_share_type
from constellations.principals import Principal
from constellations.services import Services
from constellations.sessions import (
    is_valid_session,
    try_add_impression,
    try_add_like,
    try_remove_like,
)

router = APIRouter()


@router.get("/scene/{scene_id}/click")
def click_scene(
    scene_id: str,
    principal: Principal | None = Depends(get_principal),
    services: Services = Depends(get_services),
) -> RedirectResponse:
    scene = services.scenes.get(scene_id)
    if scene is None or not scene.outgoing_url:
        raise NotFoundError("Not found")

    services.events.log_click(scene.id, principal)
    return RedirectResponse(scene.outgoing_url, status_code=302)


@router.post("/scene/{scene_id}/impressions")
def add_impression(
    scene_id: str,
    principal: Principal | None = Depends(get_principal),
    services: Services = Depends(get_services),
    session: dict[str, Any] = Depends(get_session),
) -> dict[str, Any]:
    scene = services.scenes.require(scene_id)
    success = try_add_impression(
        session, scene.id, window_seconds=services.settings.impression_window_seconds
    )
    if success:
        services.events.log_impression(scene.id, principal)
    return {"error": False, "id": scene.id, "success": success}


@router.post("/scene/{scene_id}/likes")
def add_like(
    scene_id: str,
    principal: Principal | None = Depends(get_principal),
    services: Services = Depends(get_services),
    session: dict[str, Any] = Depends(get_session),
) -> dict[str, Any]:
    scene = services.scenes.require(scene_id)
    success = try_add_like(session, scene.id)
    if success:
        services.events.log_like(scene.id, principal, 1)
    return {"error": False, "id": scene.id, "success": success}


@router.delete("/scene/{scene_id}/likes")
def remove_like(
    scene_id: str,
    principal: Principal | None = Depends(get_principal),
    services: Services = Depends(get_services),
    session: dict[str, Any] = Depends(get_session),
) -> dict[str, Any]:
    scene = services.scenes.require(scene_id)
    success = try_remove_like(session, scene.id)
    if success:
        services.events.log_like(scene.id, principal, -1)
    return {"error": False, "id": scene.id, "success": success}


@router.post("/scene/{scene_id}/shares/{share_type}")
def add_share(
    scene_id: str,
    share_type: str,
    principal: Principal | None = Depends(get_principal),
    services: Services = Depends(get_services),
    session: dict[str, Any] = Depends(get_session),
) -> dict[str, Any]:
    if not is_share_type(share_type):
        raise HTTPException(status_code=400, detail=f"{share_type} is not a valid scene sharing type")

    scene = services.scenes.require(scene_id)
    # Shares are counted on every call from a live session, no dedup.
    success = is_valid_session(session, max_age_seconds=services.settings.session_max_age_seconds)
    if success:
        services.events.log_share(scene.id, principal, share_type)
    return {"error": False, "id": scene.id, "success": success}
