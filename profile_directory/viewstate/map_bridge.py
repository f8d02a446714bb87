"""Keeps the map camera in step with the engine's selection state."""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence, Tuple

from profile_directory.config import Settings, get_settings
from profile_directory.profiles.models import Coordinates, Profile
from profile_directory.viewstate.engine import ProfileViewEngine
from profile_directory.viewstate.models import Bounds, MapMarker, MapView, ViewSnapshot

logger = logging.getLogger(__name__)

WORLD_TILE_PX = 256
MAX_MERCATOR_LAT = 85.05112878


def placeable(profiles: Sequence[Profile]) -> Tuple[Profile, ...]:
    """Profiles that can carry a marker; the rest are skipped silently."""
    return tuple(profile for profile in profiles if profile.has_coordinates)


def compute_bounds(profiles: Sequence[Profile]) -> Optional[Bounds]:
    points = [p.coordinates for p in placeable(profiles) if p.coordinates is not None]
    if not points:
        return None
    return Bounds(
        south=min(point.lat for point in points),
        west=min(point.lng for point in points),
        north=max(point.lat for point in points),
        east=max(point.lng for point in points),
    )


def _mercator_lat(lat: float) -> float:
    lat = max(min(lat, MAX_MERCATOR_LAT), -MAX_MERCATOR_LAT)
    sin = math.sin(math.radians(lat))
    rad_x2 = math.log((1 + sin) / (1 - sin)) / 2
    return max(min(rad_x2, math.pi), -math.pi) / 2


def _zoom_for(map_px: int, fraction: float) -> float:
    if fraction <= 0:
        return math.inf
    return math.floor(math.log(map_px / WORLD_TILE_PX / fraction) / math.log(2))


def fit_bounds_zoom(
    bounds: Bounds, width_px: int, height_px: int, max_zoom: int
) -> int:
    """Largest Web-Mercator zoom at which ``bounds`` fits the viewport, clamped to ``max_zoom``."""
    lat_fraction = (_mercator_lat(bounds.north) - _mercator_lat(bounds.south)) / math.pi
    lng_diff = bounds.east - bounds.west
    lng_fraction = (lng_diff + 360 if lng_diff < 0 else lng_diff) / 360

    zoom = min(
        _zoom_for(height_px, lat_fraction),
        _zoom_for(width_px, lng_fraction),
        max_zoom,
    )
    return max(int(zoom), 0)


def cycle_profile(
    profiles: Sequence[Profile], current_id: Optional[int], step: int
) -> Optional[Profile]:
    """
    Neighbour of ``current_id`` in ``profiles`` with wraparound.

    Returns None when nothing is selected or there is nothing to move to.
    A selection outside the sequence moves to the first entry going forward
    and the last entry going back.
    """
    if current_id is None or len(profiles) <= 1:
        return None
    ids = [profile.id for profile in profiles]
    if current_id not in ids:
        return profiles[0] if step > 0 else profiles[-1]
    index = ids.index(current_id)
    return profiles[(index + step) % len(profiles)]


class MapSelectionBridge:
    """Derives the map view from engine state and routes map clicks back to it."""

    def __init__(
        self, engine: ProfileViewEngine, settings: Optional[Settings] = None
    ) -> None:
        self.engine = engine
        self.settings = settings or get_settings()

    @property
    def default_center(self) -> Coordinates:
        return Coordinates(
            lat=self.settings.map_default_center_lat,
            lng=self.settings.map_default_center_lng,
        )

    def displayed_profiles(self, snapshot: ViewSnapshot) -> Tuple[Profile, ...]:
        if snapshot.show_all_on_map:
            return snapshot.filtered_profiles
        if snapshot.selected_profile is not None:
            return (snapshot.selected_profile,)
        return ()

    def view(self) -> MapView:
        snapshot = self.engine.snapshot()
        displayed = self.displayed_profiles(snapshot)
        selected = snapshot.selected_profile
        selected_id = selected.id if selected is not None else None
        with_coordinates = placeable(displayed)

        markers = tuple(
            MapMarker(
                profile_id=profile.id,
                name=profile.name,
                position=profile.coordinates,
                highlighted=profile.id == selected_id,
            )
            for profile in with_coordinates
        )

        navigation = snapshot.filtered_profiles
        position = None
        if selected_id is not None:
            ids = [profile.id for profile in navigation]
            if selected_id in ids:
                position = ids.index(selected_id) + 1

        common = dict(
            displayed=displayed,
            markers=markers,
            selected_id=selected_id,
            position=position,
            total=len(navigation),
        )

        if len(with_coordinates) > 1:
            bounds = compute_bounds(with_coordinates)
            zoom = fit_bounds_zoom(
                bounds,
                self.settings.map_viewport_width_px,
                self.settings.map_viewport_height_px,
                self.settings.map_max_fit_zoom,
            )
            return MapView(
                mode="fit_bounds", center=bounds.center, zoom=zoom, bounds=bounds, **common
            )

        focus = None
        if selected is not None and selected.has_coordinates:
            focus = selected
        elif len(with_coordinates) == 1:
            focus = with_coordinates[0]

        if focus is not None:
            return MapView(
                mode="focused",
                center=focus.coordinates,
                zoom=self.settings.map_focused_zoom,
                **common,
            )

        if selected is not None:
            logger.debug(f"Selected profile {selected.id} has no coordinates; not placed")
        return MapView(
            mode="empty",
            center=self.default_center,
            zoom=self.settings.map_default_zoom,
            **common,
        )

    def marker_clicked(self, profile_id: int) -> MapView:
        self.engine.select(profile_id)
        return self.view()

    def next(self) -> MapView:
        return self._step(1)

    def previous(self) -> MapView:
        return self._step(-1)

    def _step(self, step: int) -> MapView:
        """Cycles through the filtered list, since selecting turns show-all off and
        would otherwise leave a single displayed profile to navigate."""
        snapshot = self.engine.snapshot()
        current = snapshot.selected_profile
        target = cycle_profile(
            snapshot.filtered_profiles, current.id if current else None, step
        )
        if target is not None:
            self.engine.select(target)
        return self.view()
