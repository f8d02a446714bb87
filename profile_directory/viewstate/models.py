"""Immutable view snapshots handed to renderers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Literal, Optional, Tuple

from profile_directory.profiles.models import Coordinates, Profile


SortKey = Literal["name", "rating"]
SortDirection = Literal["asc", "desc"]
MapMode = Literal["empty", "focused", "fit_bounds"]

SORT_KEYS: Tuple[str, ...] = ("name", "rating")
FAVORITES_FILTER = "favorites"
KNOWN_FILTERS: FrozenSet[str] = frozenset({FAVORITES_FILTER})


@dataclass(frozen=True, slots=True)
class ViewSnapshot:
    all_profiles: Tuple[Profile, ...]
    filtered_profiles: Tuple[Profile, ...]
    search_term: str
    active_filters: Tuple[str, ...]
    sort_key: SortKey
    sort_direction: SortDirection
    selected_profile: Optional[Profile]
    show_all_on_map: bool
    favorites: Tuple[int, ...]
    loading: bool = False
    error: Optional[str] = None
    has_loaded: bool = False


@dataclass(frozen=True, slots=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    @property
    def center(self) -> Coordinates:
        return Coordinates(
            lat=(self.south + self.north) / 2, lng=(self.west + self.east) / 2
        )

    def contains(self, point: Coordinates) -> bool:
        return (
            self.south <= point.lat <= self.north
            and self.west <= point.lng <= self.east
        )


@dataclass(frozen=True, slots=True)
class MapMarker:
    profile_id: int
    name: str
    position: Coordinates
    highlighted: bool = False


@dataclass(frozen=True, slots=True)
class MapView:
    mode: MapMode
    displayed: Tuple[Profile, ...]
    markers: Tuple[MapMarker, ...]
    center: Coordinates
    zoom: int
    bounds: Optional[Bounds] = None
    selected_id: Optional[int] = None
    position: Optional[int] = None
    total: int = 0
