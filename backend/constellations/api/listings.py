"""Scene listing endpoints: home timeline, AstroPix summary, handle dashboard."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from constellations.api.params import page_number, parse_int
from constellations.dependencies import get_principal, get_services, peek_session
from constellations.directory.handles import HandleAction
from constellations.errors import ForbiddenError, NotFoundError
from constellations.principals import Principal
from constellations.scenes import queries
from constellations.services import Services

router = APIRouter()


@router.get("/scenes/home-timeline")
def get_home_timeline(
    page: str | None = None,
    services: Services = Depends(get_services),
    session: dict[str, Any] | None = Depends(peek_session),
) -> dict[str, Any]:
    scenes = queries.home_timeline(services.scenes, services.resolver, page_number(page), session)
    return {"error": False, "results": [s.to_json() for s in scenes]}


@router.get("/scenes/astropix-summary")
def get_astropix_summary(services: Services = Depends(get_services)) -> dict[str, Any]:
    # Polled by the AstroPix service to learn which of its images have scenes.
    return {"error": False, "result": queries.astropix_summary(services.scenes, services.handles)}


@router.get("/handle/{handle}/sceneinfo")
def get_handle_scene_info(
    handle: str,
    page: str | None = None,
    pagesize: str | None = None,
    principal: Principal | None = Depends(get_principal),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    owner = services.handles.find_by_name(handle)
    if owner is None:
        raise NotFoundError("Not found")

    page_size = parse_int(pagesize)
    if page_size is None or not 0 < page_size <= queries.DASHBOARD_MAX_PAGE_SIZE:
        page_size = queries.DASHBOARD_DEFAULT_PAGE_SIZE

    if not services.handles.is_allowed(principal, owner, HandleAction.VIEW_DASHBOARD):
        raise ForbiddenError("Forbidden")

    total, infos = queries.handle_scene_info(services.scenes, owner, page_number(page), page_size)
    return {
        "error": False,
        "total_count": total,
        "results": [i.model_dump(mode="json", by_alias=True) for i in infos],
    }
