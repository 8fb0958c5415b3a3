"""Top-level router: mounts the health, scene, interaction and listing routers."""

from __future__ import annotations

from fastapi import APIRouter

from constellations.api import health, interactions, listings, scenes

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(scenes.router)
api_router.include_router(interactions.router)
api_router.include_router(listings.router)
