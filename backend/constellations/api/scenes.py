"""Scene endpoints: create, read, permissions, WTML, patch, nearby."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException
from fastapi.responses import Response

from constellations.api.params import parse_int
from constellations.dependencies import get_principal, get_services, peek_session, require_principal
from constellations.principals import Principal
from constellations.scenes.authz import AuthorizationContext
from constellations.scenes.nearby import GLOBAL_TESSELLATION, nearby_scenes
from constellations.services import Services

router = APIRouter()


@router.post("/handle/{handle}/scene")
def create_scene(
    handle: str,
    background_tasks: BackgroundTasks,
    payload: dict[str, Any] = Body(...),
    principal: Principal = Depends(require_principal),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    created = services.engine.create(principal, handle, payload)
    background_tasks.add_task(services.dispatcher.dispatch_pending)
    return {"error": False, "id": created.id, "rel_url": created.rel_url}


@router.get("/scene/{scene_id}")
def get_scene(
    scene_id: str,
    services: Services = Depends(get_services),
    session: dict[str, Any] | None = Depends(peek_session),
) -> dict[str, Any]:
    scene = services.scenes.require(scene_id)
    output = services.resolver.hydrate(scene, session).to_json()
    output["error"] = False
    return output


@router.get("/scene/{scene_id}/permissions")
def get_scene_permissions(
    scene_id: str,
    principal: Principal | None = Depends(get_principal),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    # Informative only: the mutation endpoints make the real decisions.
    scene = services.scenes.require(scene_id)
    ctx = AuthorizationContext(principal, scene, services.handles)
    return {"error": False, "id": scene.id, "edit": ctx.can_edit}


@router.get("/scene/{scene_id}/place.wtml")
def get_scene_place_wtml(
    scene_id: str,
    services: Services = Depends(get_services),
) -> Response:
    scene = services.scenes.require(scene_id)
    return Response(content=services.resolver.legacy_place_wtml(scene), media_type="application/xml")


@router.patch("/scene/{scene_id}")
def patch_scene(
    scene_id: str,
    background_tasks: BackgroundTasks,
    payload: dict[str, Any] = Body(...),
    principal: Principal = Depends(require_principal),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    result = services.engine.patch(principal, scene_id, payload)
    if result.preview_requested:
        background_tasks.add_task(services.dispatcher.dispatch_pending)
    return {"error": False}


@router.get("/scene/{scene_id}/nearby-global")
def get_nearby_global(
    scene_id: str,
    size: str | None = None,
    services: Services = Depends(get_services),
    session: dict[str, Any] | None = Depends(peek_session),
) -> dict[str, Any]:
    limit = parse_int(size)
    if limit is None or limit <= 0:
        raise HTTPException(status_code=400, detail="invalid size")

    results = nearby_scenes(
        scene_id,
        GLOBAL_TESSELLATION,
        limit,
        scenes=services.scenes,
        tessellations=services.tessellations,
        resolver=services.resolver,
        session=session,
    )
    return {"error": False, "results": [s.to_json() for s in results]}
