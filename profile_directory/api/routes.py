"""HTTP route handlers for the directory, the view state and the admin surface."""

from __future__ import annotations

from typing import Any, Dict, NoReturn, Type

import orjson
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from profile_directory.config import Settings, get_settings
from profile_directory.errors import (
    FavoritesStorageError,
    ProfileNotFoundError,
    ProfileValidationError,
    ViewStateError,
)
from profile_directory.profiles.forms import ProfileFormService
from profile_directory.profiles.models import ProfileSummary
from profile_directory.profiles.store import ProfileStore
from profile_directory.viewstate.engine import ProfileViewEngine
from profile_directory.viewstate.map_bridge import MapSelectionBridge

from .schemas import (
    DeleteResponseModel,
    FavoritesResponseModel,
    FavoriteToggleResponseModel,
    MapViewResponseModel,
    ProfileDetailResponseModel,
    ProfilePageResponseModel,
    SearchRequestModel,
    SelectRequestModel,
    ShowAllRequestModel,
    SortRequestModel,
    ViewStateResponseModel,
)


router = APIRouter()


async def _read_json_body(http_request: Request, settings: Settings) -> Dict[str, Any]:
    header_length = http_request.headers.get("content-length")
    if header_length:
        try:
            content_length = int(header_length)
        except ValueError:
            content_length = None
        else:
            if content_length > settings.max_payload_bytes:
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail={
                        "error": "payload_too_large",
                        "limit_bytes": settings.max_payload_bytes,
                    },
                )

    body_bytes = await http_request.body()
    if body_bytes and len(body_bytes) > settings.max_payload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={
                "error": "payload_too_large",
                "limit_bytes": settings.max_payload_bytes,
            },
        )

    if not body_bytes:
        return {}
    try:
        data = orjson.loads(body_bytes)
    except orjson.JSONDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_json", "details": str(exc)},
        ) from exc
    if not isinstance(data, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_json", "details": "Expected a JSON object."},
        )
    return data


async def _load_request_model(
    http_request: Request, model_cls: Type[BaseModel]
) -> BaseModel:
    data = await _read_json_body(http_request, get_settings())
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


async def load_search_request(http_request: Request) -> SearchRequestModel:
    return await _load_request_model(http_request, SearchRequestModel)


async def load_sort_request(http_request: Request) -> SortRequestModel:
    return await _load_request_model(http_request, SortRequestModel)


async def load_select_request(http_request: Request) -> SelectRequestModel:
    return await _load_request_model(http_request, SelectRequestModel)


async def load_show_all_request(http_request: Request) -> ShowAllRequestModel:
    return await _load_request_model(http_request, ShowAllRequestModel)


async def load_form_data(http_request: Request) -> Dict[str, Any]:
    return await _read_json_body(http_request, get_settings())


def get_store(http_request: Request) -> ProfileStore:
    return http_request.app.state.store


def get_form_service(http_request: Request) -> ProfileFormService:
    return http_request.app.state.form_service


async def get_engine(http_request: Request) -> ProfileViewEngine:
    """The shared engine; the first access performs the initial load."""
    engine: ProfileViewEngine = http_request.app.state.engine
    if not engine.has_loaded:
        await engine.load()
    return engine


async def get_map_bridge(
    http_request: Request, engine: ProfileViewEngine = Depends(get_engine)
) -> MapSelectionBridge:
    return http_request.app.state.map_bridge


def _not_found(exc: ProfileNotFoundError) -> NoReturn:
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "not_found",
            "details": str(exc),
            "profile_id": exc.profile_id,
        },
    ) from exc


def _storage_unavailable(exc: FavoritesStorageError) -> NoReturn:
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"error": "storage_unavailable", "details": str(exc)},
    ) from exc


def _view(snapshot) -> ViewStateResponseModel:
    return ViewStateResponseModel.from_domain(snapshot)


# Directory and admin


@router.get("/v1/profiles", response_model=ProfilePageResponseModel)
async def list_profiles(
    q: str = Query(default="", description="Matches name, address or contact."),
    page: int = Query(default=0, ge=0),
    page_size: int = Query(default=5, ge=1, le=100),
    store: ProfileStore = Depends(get_store),
):
    profiles = await store.list_profiles()
    needle = q.strip().casefold()
    if needle:
        profiles = [
            profile
            for profile in profiles
            if needle in profile.name.casefold()
            or needle in profile.address.casefold()
            or needle in profile.contact.casefold()
        ]
    start = page * page_size
    return ProfilePageResponseModel(
        items=[ProfileSummary.from_profile(p) for p in profiles[start : start + page_size]],
        total=len(profiles),
        page=page,
        page_size=page_size,
    )


@router.get("/v1/profiles/{profile_id}", response_model=ProfileDetailResponseModel)
async def get_profile(
    http_request: Request,
    profile_id: int,
    store: ProfileStore = Depends(get_store),
):
    try:
        profile = await store.get_profile(profile_id)
    except ProfileNotFoundError as exc:
        _not_found(exc)
    engine: ProfileViewEngine = http_request.app.state.engine
    try:
        is_favorite = engine.is_favorite(profile_id)
    except FavoritesStorageError as exc:
        _storage_unavailable(exc)
    return ProfileDetailResponseModel(profile=profile, is_favorite=is_favorite)


async def _submit_form(
    form_service: ProfileFormService, data: Dict[str, Any], profile_id: int | None = None
):
    try:
        return await form_service.submit(data, profile_id=profile_id)
    except ProfileValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "validation_error",
                "details": str(exc),
                "fields": exc.fields,
            },
        ) from exc
    except ProfileNotFoundError as exc:
        _not_found(exc)


@router.post("/v1/profiles", status_code=status.HTTP_201_CREATED)
async def create_profile(
    data: Dict[str, Any] = Depends(load_form_data),
    form_service: ProfileFormService = Depends(get_form_service),
):
    profile = await _submit_form(form_service, data)
    return profile.model_dump()


@router.put("/v1/profiles/{profile_id}")
async def update_profile(
    profile_id: int,
    data: Dict[str, Any] = Depends(load_form_data),
    form_service: ProfileFormService = Depends(get_form_service),
):
    profile = await _submit_form(form_service, data, profile_id=profile_id)
    return profile.model_dump()


@router.delete("/v1/profiles/{profile_id}", response_model=DeleteResponseModel)
async def delete_profile(profile_id: int, store: ProfileStore = Depends(get_store)):
    try:
        await store.delete_profile(profile_id)
    except ProfileNotFoundError as exc:
        _not_found(exc)
    return DeleteResponseModel()


# View state


@router.get("/v1/view", response_model=ViewStateResponseModel)
async def get_view(engine: ProfileViewEngine = Depends(get_engine)):
    return _view(engine.snapshot())


@router.post("/v1/view/refresh", response_model=ViewStateResponseModel)
async def refresh_view(http_request: Request):
    engine: ProfileViewEngine = http_request.app.state.engine
    return _view(await engine.load())


@router.post("/v1/view/search", response_model=ViewStateResponseModel)
async def search_view(
    search_request: SearchRequestModel = Depends(load_search_request),
    engine: ProfileViewEngine = Depends(get_engine),
):
    return _view(engine.search(search_request.term))


@router.post("/v1/view/filters/clear", response_model=ViewStateResponseModel)
async def clear_filters(engine: ProfileViewEngine = Depends(get_engine)):
    return _view(engine.clear_filters())


@router.post("/v1/view/filters/{name}/toggle", response_model=ViewStateResponseModel)
async def toggle_filter(name: str, engine: ProfileViewEngine = Depends(get_engine)):
    try:
        return _view(engine.toggle_filter(name))
    except ViewStateError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "unknown_filter", "details": str(exc)},
        ) from exc
    except FavoritesStorageError as exc:
        _storage_unavailable(exc)


@router.post("/v1/view/sort", response_model=ViewStateResponseModel)
async def sort_view(
    sort_request: SortRequestModel = Depends(load_sort_request),
    engine: ProfileViewEngine = Depends(get_engine),
):
    return _view(engine.set_sort(sort_request.key))


@router.post("/v1/view/selection", response_model=ViewStateResponseModel)
async def select_profile(
    select_request: SelectRequestModel = Depends(load_select_request),
    engine: ProfileViewEngine = Depends(get_engine),
):
    try:
        return _view(engine.select(select_request.profile_id))
    except ProfileNotFoundError as exc:
        _not_found(exc)


@router.delete("/v1/view/selection", response_model=ViewStateResponseModel)
async def clear_selection(engine: ProfileViewEngine = Depends(get_engine)):
    return _view(engine.clear_selection())


@router.post("/v1/view/show-all", response_model=ViewStateResponseModel)
async def show_all_on_map(
    show_all_request: ShowAllRequestModel = Depends(load_show_all_request),
    engine: ProfileViewEngine = Depends(get_engine),
):
    return _view(engine.set_show_all_on_map(show_all_request.enabled))


@router.post("/v1/view/error/dismiss", response_model=ViewStateResponseModel)
async def dismiss_error(engine: ProfileViewEngine = Depends(get_engine)):
    return _view(engine.dismiss_error())


# Favorites


@router.get("/v1/favorites", response_model=FavoritesResponseModel)
async def list_favorites(http_request: Request):
    engine: ProfileViewEngine = http_request.app.state.engine
    try:
        return FavoritesResponseModel(favorites=engine.favorites.ids())
    except FavoritesStorageError as exc:
        _storage_unavailable(exc)


@router.post(
    "/v1/favorites/{profile_id}/toggle", response_model=FavoriteToggleResponseModel
)
async def toggle_favorite(
    profile_id: int, engine: ProfileViewEngine = Depends(get_engine)
):
    try:
        snapshot = engine.toggle_favorite(profile_id)
    except FavoritesStorageError as exc:
        _storage_unavailable(exc)
    return FavoriteToggleResponseModel(
        profile_id=profile_id,
        is_favorite=profile_id in snapshot.favorites,
        favorites=list(snapshot.favorites),
    )


# Map


@router.get("/v1/view/map", response_model=MapViewResponseModel)
async def get_map_view(bridge: MapSelectionBridge = Depends(get_map_bridge)):
    return MapViewResponseModel.from_domain(bridge.view())


@router.post(
    "/v1/view/map/markers/{profile_id}/click", response_model=MapViewResponseModel
)
async def click_marker(
    profile_id: int, bridge: MapSelectionBridge = Depends(get_map_bridge)
):
    try:
        return MapViewResponseModel.from_domain(bridge.marker_clicked(profile_id))
    except ProfileNotFoundError as exc:
        _not_found(exc)


@router.post("/v1/view/map/next", response_model=MapViewResponseModel)
async def map_next(bridge: MapSelectionBridge = Depends(get_map_bridge)):
    return MapViewResponseModel.from_domain(bridge.next())


@router.post("/v1/view/map/previous", response_model=MapViewResponseModel)
async def map_previous(bridge: MapSelectionBridge = Depends(get_map_bridge)):
    return MapViewResponseModel.from_domain(bridge.previous())
