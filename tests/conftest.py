"""Pytest configuration and shared fixtures."""

from typing import List

import pytest

from profile_directory.config import DEFAULT_SEED_PATH, Settings
from profile_directory.profiles.favorites import FavoritesRepository, MemoryStorage
from profile_directory.profiles.models import Profile
from profile_directory.profiles.store import InMemoryProfileStore, load_seed_profiles
from profile_directory.viewstate.engine import ProfileViewEngine


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio to use only asyncio backend."""
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    """Settings without simulated latency."""
    return Settings(
        store_read_latency_ms=0,
        store_write_latency_ms=0,
        store_delete_latency_ms=0,
        favorites_storage_path=None,
    )


@pytest.fixture
def seed_profiles() -> List[Profile]:
    return load_seed_profiles(DEFAULT_SEED_PATH)


@pytest.fixture
def store(seed_profiles) -> InMemoryProfileStore:
    return InMemoryProfileStore(seed_profiles)


@pytest.fixture
def favorites() -> FavoritesRepository:
    return FavoritesRepository(MemoryStorage())


@pytest.fixture
def engine(store, favorites) -> ProfileViewEngine:
    return ProfileViewEngine(store, favorites)


def _make_profile(profile_id: int, name: str, **fields) -> Profile:
    data = {
        "id": profile_id,
        "name": name,
        "description": fields.pop("description", f"{name} description"),
        "address": fields.pop("address", "Somewhere"),
        "image": fields.pop("image", f"https://example.com/{profile_id}.jpg"),
        "contact": fields.pop("contact", f"user{profile_id}@example.com"),
    }
    data.update(fields)
    return Profile.model_validate(data)


@pytest.fixture
def make_profile():
    """Build a profile with filler values for anything not given."""
    return _make_profile

