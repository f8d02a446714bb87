"""Profile records, the store that holds them, and their collaborators."""

from profile_directory.profiles.favorites import FavoritesRepository
from profile_directory.profiles.models import Coordinates, Profile, ProfileSummary
from profile_directory.profiles.store import InMemoryProfileStore, ProfileStore

__all__ = [
    "Coordinates",
    "Profile",
    "ProfileSummary",
    "ProfileStore",
    "InMemoryProfileStore",
    "FavoritesRepository",
]
