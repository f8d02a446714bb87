# profile_directory/api/schemas.py
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from profile_directory.profiles.models import Coordinates, Profile, ProfileSummary

SortKeyLiteral = Literal["name", "rating"]


class SearchRequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    term: str = Field(default="", description="Free-text search; empty clears it.")

    @field_validator("term", mode="before")
    @classmethod
    def normalize_term(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)


class SortRequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    key: SortKeyLiteral


class SelectRequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    profile_id: int


class ShowAllRequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool


class ViewStateResponseModel(BaseModel):
    profiles: List[Profile]
    total: int
    search_term: str
    active_filters: List[str]
    sort_key: str
    sort_direction: str
    selected_profile: Optional[Profile] = None
    show_all_on_map: bool
    favorites: List[int]
    loading: bool
    has_loaded: bool = False
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, snapshot) -> "ViewStateResponseModel":
        return cls(
            profiles=list(snapshot.filtered_profiles),
            total=len(snapshot.all_profiles),
            search_term=snapshot.search_term,
            active_filters=list(snapshot.active_filters),
            sort_key=snapshot.sort_key,
            sort_direction=snapshot.sort_direction,
            selected_profile=snapshot.selected_profile,
            show_all_on_map=snapshot.show_all_on_map,
            favorites=list(snapshot.favorites),
            loading=snapshot.loading,
            has_loaded=snapshot.has_loaded,
            error=snapshot.error,
        )


class BoundsModel(BaseModel):
    south: float
    west: float
    north: float
    east: float


class MapMarkerModel(BaseModel):
    profile_id: int
    name: str
    position: Coordinates
    highlighted: bool


class MapViewResponseModel(BaseModel):
    mode: str
    center: Coordinates
    zoom: int
    bounds: Optional[BoundsModel] = None
    markers: List[MapMarkerModel] = Field(default_factory=list)
    displayed_ids: List[int] = Field(default_factory=list)
    selected_id: Optional[int] = None
    position: Optional[int] = None
    total: int = 0

    @classmethod
    def from_domain(cls, view) -> "MapViewResponseModel":
        bounds = None
        if view.bounds is not None:
            bounds = BoundsModel(
                south=view.bounds.south,
                west=view.bounds.west,
                north=view.bounds.north,
                east=view.bounds.east,
            )
        return cls(
            mode=view.mode,
            center=view.center,
            zoom=view.zoom,
            bounds=bounds,
            markers=[
                MapMarkerModel(
                    profile_id=m.profile_id,
                    name=m.name,
                    position=m.position,
                    highlighted=m.highlighted,
                )
                for m in view.markers
            ],
            displayed_ids=[profile.id for profile in view.displayed],
            selected_id=view.selected_id,
            position=view.position,
            total=view.total,
        )


class ProfileDetailResponseModel(BaseModel):
    profile: Profile
    is_favorite: bool


class ProfilePageResponseModel(BaseModel):
    items: List[ProfileSummary]
    total: int
    page: int
    page_size: int


class FavoriteToggleResponseModel(BaseModel):
    profile_id: int
    is_favorite: bool
    favorites: List[int]


class FavoritesResponseModel(BaseModel):
    favorites: List[int]


class DeleteResponseModel(BaseModel):
    success: bool = True
