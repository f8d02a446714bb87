"""Profile store: seed loading and the in-memory collection."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import anyio
import yaml
from pydantic import ValidationError

from profile_directory.config import Settings
from profile_directory.errors import ProfileNotFoundError
from profile_directory.profiles.models import Profile

logger = logging.getLogger(__name__)


def load_seed_profiles(seed_path: str | Path) -> List[Profile]:
    """
    Load seed profiles from a YAML file.

    The file holds either a list of profile mappings or a mapping with a
    ``profiles`` key.

    Args:
        seed_path: Path to the YAML seed file

    Returns:
        Validated profiles in file order

    Raises:
        yaml.YAMLError: If the file is not valid YAML
        ValidationError: If a profile fails validation
        ValueError: If two entries share an id
    """
    path = Path(seed_path)
    if not path.exists():
        logger.warning(f"Seed profiles file not found: {seed_path}")
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"YAML parse error in {path}: {e}")
        raise

    if not data:
        logger.warning(f"Empty seed profiles file: {path}")
        return []

    entries = data.get("profiles", []) if isinstance(data, dict) else data

    profiles: List[Profile] = []
    seen: set[int] = set()
    for entry in entries:
        try:
            profile = Profile.model_validate(entry)
        except ValidationError as e:
            logger.error(f"Validation error in {path}: {e}")
            raise
        if profile.id in seen:
            raise ValueError(f"Duplicate profile id {profile.id} in {path}")
        seen.add(profile.id)
        profiles.append(profile)

    logger.info(f"Seed profiles loaded: {len(profiles)} from {path}")
    return profiles


class ProfileStore(ABC):
    """Authoritative profile collection consumed by the engine and the admin form."""

    @abstractmethod
    async def list_profiles(self) -> List[Profile]:
        """Return every profile in store order."""

    @abstractmethod
    async def get_profile(self, profile_id: int) -> Profile:
        """Return one profile or raise ProfileNotFoundError."""

    @abstractmethod
    async def create_profile(self, data: Dict[str, Any]) -> Profile:
        """Persist a new profile and assign its id."""

    @abstractmethod
    async def update_profile(self, profile_id: int, data: Dict[str, Any]) -> Profile:
        """Merge ``data`` into an existing profile."""

    @abstractmethod
    async def delete_profile(self, profile_id: int) -> None:
        """Remove a profile or raise ProfileNotFoundError."""


class InMemoryProfileStore(ProfileStore):
    """Process-lifetime store with simulated latency."""

    def __init__(
        self,
        profiles: Optional[Iterable[Profile]] = None,
        *,
        read_latency_ms: int = 0,
        write_latency_ms: int = 0,
        delete_latency_ms: int = 0,
    ) -> None:
        self._profiles: List[Profile] = list(profiles or [])
        self._read_delay = read_latency_ms / 1000
        self._write_delay = write_latency_ms / 1000
        self._delete_delay = delete_latency_ms / 1000

    @classmethod
    def from_settings(cls, settings: Settings) -> "InMemoryProfileStore":
        return cls(
            load_seed_profiles(settings.seed_profiles_path),
            read_latency_ms=settings.store_read_latency_ms,
            write_latency_ms=settings.store_write_latency_ms,
            delete_latency_ms=settings.store_delete_latency_ms,
        )

    async def _simulate(self, delay: float) -> None:
        if delay > 0:
            await anyio.sleep(delay)

    def _index_of(self, profile_id: int) -> int:
        for index, profile in enumerate(self._profiles):
            if profile.id == profile_id:
                return index
        raise ProfileNotFoundError(profile_id)

    def _next_id(self) -> int:
        return max((profile.id for profile in self._profiles), default=0) + 1

    async def list_profiles(self) -> List[Profile]:
        await self._simulate(self._read_delay)
        return list(self._profiles)

    async def get_profile(self, profile_id: int) -> Profile:
        await self._simulate(self._read_delay)
        return self._profiles[self._index_of(profile_id)]

    async def create_profile(self, data: Dict[str, Any]) -> Profile:
        await self._simulate(self._write_delay)
        payload = {key: value for key, value in data.items() if key != "id"}
        profile = Profile.model_validate({**payload, "id": self._next_id()})
        self._profiles.append(profile)
        logger.info(f"Created profile {profile.id} ({profile.name})")
        return profile

    async def update_profile(self, profile_id: int, data: Dict[str, Any]) -> Profile:
        await self._simulate(self._write_delay)
        index = self._index_of(profile_id)
        updated = self._profiles[index].with_updates(data)
        self._profiles[index] = updated
        logger.info(f"Updated profile {profile_id}")
        return updated

    async def delete_profile(self, profile_id: int) -> None:
        await self._simulate(self._delete_delay)
        index = self._index_of(profile_id)
        del self._profiles[index]
        logger.info(f"Deleted profile {profile_id}")
