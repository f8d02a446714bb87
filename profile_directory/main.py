"""FastAPI application factory and global exception handling."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from profile_directory import __version__ as app_version
from profile_directory.api.routes import router
from profile_directory.config import Settings, get_settings
from profile_directory.profiles.favorites import FavoritesRepository
from profile_directory.profiles.forms import ProfileFormService
from profile_directory.profiles.store import InMemoryProfileStore, ProfileStore
from profile_directory.viewstate.engine import ProfileViewEngine
from profile_directory.viewstate.map_bridge import MapSelectionBridge


def create_application(
    settings: Optional[Settings] = None,
    *,
    store: Optional[ProfileStore] = None,
    favorites: Optional[FavoritesRepository] = None,
) -> FastAPI:
    """Create the application and wire the store, favorites and engine it owns."""
    settings = settings or get_settings()
    logging.getLogger("profile_directory").setLevel(settings.log_level.upper())

    app = FastAPI(
        title=settings.app_name,
        description="Searchable people directory with map selection state.",
        version=app_version,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if store is None:
        store = InMemoryProfileStore.from_settings(settings)
    if favorites is None:
        favorites = FavoritesRepository.from_settings(settings)
    engine = ProfileViewEngine(store, favorites)

    app.state.settings = settings
    app.state.store = store
    app.state.engine = engine
    app.state.map_bridge = MapSelectionBridge(engine, settings)
    app.state.form_service = ProfileFormService(
        store, jitter_degrees=settings.geocode_jitter_degrees
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "validation_error", "details": _jsonable(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        detail = exc.detail
        if isinstance(detail, dict) and "error" in detail:
            payload = detail
        elif exc.status_code == 404:
            payload = {"error": "not_found", "details": detail}
        else:
            payload = {"error": "http_error", "details": detail}
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.get("/healthz", tags=["health"])
    async def healthz() -> dict[str, Any]:
        return {
            "status": "ok",
            "version": app_version,
            "profiles_loaded": engine.has_loaded,
        }

    app.include_router(router)
    return app


def _jsonable(errors: Any) -> Any:
    """Error lists may carry exception objects in ``ctx``."""
    if isinstance(errors, dict):
        return {key: _jsonable(value) for key, value in errors.items()}
    if isinstance(errors, (list, tuple)):
        return [_jsonable(item) for item in errors]
    if isinstance(errors, (str, int, float, bool)) or errors is None:
        return errors
    return str(errors)


app = create_application()
