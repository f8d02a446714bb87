"""Pure derivation of the visible profile list.

full set -> text predicate -> filter predicates -> comparator
"""

from __future__ import annotations

from typing import Callable, Collection, Dict, Iterable, List, Sequence, Tuple

from profile_directory.errors import InvalidSortKeyError, UnknownFilterError
from profile_directory.profiles.models import Profile
from profile_directory.viewstate.models import (
    FAVORITES_FILTER,
    SortDirection,
    SortKey,
)


def matches_search(profile: Profile, term: str) -> bool:
    """Case-insensitive substring match on name, address, description or any interest."""
    needle = term.strip().casefold()
    if not needle:
        return True
    haystacks = [profile.name, profile.address, profile.description, *profile.interests]
    return any(needle in (value or "").casefold() for value in haystacks)


def search_profiles(profiles: Iterable[Profile], term: str) -> List[Profile]:
    return [profile for profile in profiles if matches_search(profile, term)]


FilterPredicate = Callable[[Profile], bool]


def build_filter_predicates(
    active_filters: Iterable[str], favorites: Collection[int]
) -> List[FilterPredicate]:
    predicates: List[FilterPredicate] = []
    favorite_ids = frozenset(favorites)
    for name in active_filters:
        if name == FAVORITES_FILTER:
            predicates.append(lambda profile: profile.id in favorite_ids)
        else:
            raise UnknownFilterError(name)
    return predicates


def apply_filters(
    profiles: Iterable[Profile],
    active_filters: Iterable[str],
    favorites: Collection[int],
) -> List[Profile]:
    predicates = build_filter_predicates(active_filters, favorites)
    return [
        profile
        for profile in profiles
        if all(predicate(profile) for predicate in predicates)
    ]


# Rating is best-first under the "asc" direction; "desc" reverses it.
_SORT_KEY_FUNCS: Dict[str, Callable[[Profile], object]] = {
    "name": lambda profile: profile.name.casefold(),
    "rating": lambda profile: -(profile.rating or 0),
}


def sort_profiles(
    profiles: Iterable[Profile], key: SortKey, direction: SortDirection
) -> List[Profile]:
    """Stable sort; ties keep their incoming order in both directions."""
    try:
        key_func = _SORT_KEY_FUNCS[key]
    except KeyError as exc:
        raise InvalidSortKeyError(key) from exc
    return sorted(profiles, key=key_func, reverse=direction == "desc")


def derive_profiles(
    all_profiles: Sequence[Profile],
    *,
    search_term: str,
    active_filters: Iterable[str],
    favorites: Collection[int],
    sort_key: SortKey,
    sort_direction: SortDirection,
) -> Tuple[Profile, ...]:
    """Run the whole pipeline; the result is a duplicate-free subset of ``all_profiles``."""
    seen: set[int] = set()
    unique: List[Profile] = []
    for profile in all_profiles:
        if profile.id not in seen:
            seen.add(profile.id)
            unique.append(profile)

    result = search_profiles(unique, search_term)
    result = apply_filters(result, active_filters, favorites)
    return tuple(sort_profiles(result, sort_key, sort_direction))
