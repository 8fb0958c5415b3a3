"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from constellations.config import settings
from constellations.errors import ConstellationsError
from constellations.services import Services, build_services

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.constellations_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": True, "message": message})


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConstellationsError)
    async def _domain_error(request: Request, exc: ConstellationsError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s exception: %s", request.method, request.url.path, exc)
            return _error(exc.status_code, f"error serving {request.method} {request.url.path}")
        return _error(exc.status_code, exc.message or "Error")

    @app.exception_handler(RequestValidationError)
    async def _request_invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = "\n".join(
            f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()
        )
        return _error(400, f"Submission did not match schema: {problems}")

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("%s %s exception", request.method, request.url.path)
        return _error(500, f"error serving {request.method} {request.url.path}")


def create_app(services: Services | None = None) -> FastAPI:
    app = FastAPI(
        title="Constellations",
        description="Scene lifecycle, authorization and interaction tracking for sky scenes",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.services = services or build_services(settings)

    app.add_middleware(
        SessionMiddleware,
        secret_key=app.state.services.settings.session_secret,
        session_cookie="constellations_session",
        max_age=app.state.services.settings.session_max_age_seconds,
    )

    _install_error_handlers(app)

    from constellations.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
