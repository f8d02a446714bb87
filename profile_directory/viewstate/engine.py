"""Profile collection view-state engine."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple, Union

from profile_directory.errors import (
    FavoritesStorageError,
    InvalidSortKeyError,
    ProfileNotFoundError,
    ProfileStoreError,
    UnknownFilterError,
)
from profile_directory.profiles.favorites import FavoritesRepository
from profile_directory.profiles.models import Profile
from profile_directory.profiles.store import ProfileStore
from profile_directory.viewstate.models import (
    FAVORITES_FILTER,
    KNOWN_FILTERS,
    SORT_KEYS,
    SortDirection,
    SortKey,
    ViewSnapshot,
)
from profile_directory.viewstate.pipeline import derive_profiles

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load profiles. Please try again later."

ProfileRef = Union[Profile, int]


class ProfileViewEngine:
    """
    Owns the fetched profile set and derives what the list and the map show.

    Every transition recomputes ``filtered_profiles`` synchronously from
    ``all_profiles`` and returns a fresh ``ViewSnapshot``. Only ``load`` awaits.
    """

    def __init__(self, store: ProfileStore, favorites: FavoritesRepository) -> None:
        self.store = store
        self.favorites = favorites
        self._all: Tuple[Profile, ...] = ()
        self._filtered: Tuple[Profile, ...] = ()
        self._search_term = ""
        self._active_filters: List[str] = []
        self._sort_key: SortKey = "name"
        self._sort_direction: SortDirection = "asc"
        self._selected: Optional[Profile] = None
        self._show_all_on_map = False
        self._pending_loads = 0
        self._error: Optional[str] = None
        self._has_loaded = False

    @property
    def has_loaded(self) -> bool:
        return self._has_loaded

    async def load(self) -> ViewSnapshot:
        """
        Fetch the full profile set from the store.

        A store failure is recorded as a retryable error; previously loaded
        profiles stay visible.
        """
        self._pending_loads += 1
        try:
            profiles = await self.store.list_profiles()
        except ProfileStoreError as e:
            logger.error(f"Profile load failed: {e}")
            self._error = LOAD_ERROR_MESSAGE
            profiles = None
        finally:
            self._pending_loads -= 1

        if profiles is None:
            return self.snapshot()

        self._all = tuple(profiles)
        self._search_term = ""
        self._error = None
        self._has_loaded = True
        if self._selected is not None:
            self._selected = self._find(self._selected.id)
        logger.info(f"Loaded {len(self._all)} profiles")
        return self._recompute()

    def search(self, term: str) -> ViewSnapshot:
        self._search_term = (term or "").strip()
        return self._recompute()

    def toggle_filter(self, name: str) -> ViewSnapshot:
        """
        Raises FavoritesStorageError when enabling the favorites filter over
        unreadable storage; the active filters are left untouched.
        """
        if name not in KNOWN_FILTERS:
            raise UnknownFilterError(name)
        if name in self._active_filters:
            self._active_filters.remove(name)
        else:
            if name == FAVORITES_FILTER:
                self.favorites.ids()
            self._active_filters.append(name)
        return self._recompute()

    def clear_filters(self) -> ViewSnapshot:
        """Drop every filter and the search term."""
        self._active_filters = []
        self._search_term = ""
        return self._recompute()

    def set_sort(self, key: str) -> ViewSnapshot:
        if key not in SORT_KEYS:
            raise InvalidSortKeyError(key)
        if key == self._sort_key:
            self._sort_direction = "desc" if self._sort_direction == "asc" else "asc"
        else:
            self._sort_key = key  # type: ignore[assignment]
        return self._recompute()

    def select(self, profile: ProfileRef) -> ViewSnapshot:
        profile_id = profile.id if isinstance(profile, Profile) else profile
        found = self._find(profile_id)
        if found is None:
            raise ProfileNotFoundError(profile_id)
        self._selected = found
        self._show_all_on_map = False
        return self.snapshot()

    def clear_selection(self) -> ViewSnapshot:
        self._selected = None
        return self.snapshot()

    def set_show_all_on_map(self, enabled: bool) -> ViewSnapshot:
        self._show_all_on_map = bool(enabled)
        if self._show_all_on_map:
            self._selected = None
        return self.snapshot()

    def toggle_favorite(self, profile_id: int) -> ViewSnapshot:
        """Raises FavoritesStorageError when the storage is unusable."""
        self.favorites.toggle(profile_id)
        if FAVORITES_FILTER in self._active_filters:
            return self._recompute()
        return self.snapshot()

    def is_favorite(self, profile_id: int) -> bool:
        return self.favorites.contains(profile_id)

    def dismiss_error(self) -> ViewSnapshot:
        self._error = None
        return self.snapshot()

    def snapshot(self) -> ViewSnapshot:
        return ViewSnapshot(
            all_profiles=self._all,
            filtered_profiles=self._filtered,
            search_term=self._search_term,
            active_filters=tuple(self._active_filters),
            sort_key=self._sort_key,
            sort_direction=self._sort_direction,
            selected_profile=self._selected,
            show_all_on_map=self._show_all_on_map,
            favorites=self._favorite_ids(),
            loading=self._pending_loads > 0,
            error=self._error,
            has_loaded=self._has_loaded,
        )

    def _favorite_ids(self) -> Tuple[int, ...]:
        try:
            return tuple(self.favorites.ids())
        except FavoritesStorageError as e:
            logger.warning(f"Favorites unavailable for snapshot: {e}")
            return ()

    def _find(self, profile_id: int) -> Optional[Profile]:
        for profile in self._all:
            if profile.id == profile_id:
                return profile
        return None

    def _recompute(self) -> ViewSnapshot:
        # Unreadable storage yields an empty favorites set here.
        favorites = self._favorite_ids() if FAVORITES_FILTER in self._active_filters else ()
        self._filtered = derive_profiles(
            self._all,
            search_term=self._search_term,
            active_filters=self._active_filters,
            favorites=favorites,
            sort_key=self._sort_key,
            sort_direction=self._sort_direction,
        )
        return self.snapshot()
