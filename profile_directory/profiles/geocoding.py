"""Approximate geocoding used when an address is saved.

There is no real geocoder behind this: a handful of known cities act as
anchors and a small random offset distinguishes addresses within a city.
"""

from __future__ import annotations

import logging
import random
import re
from typing import Dict, Optional, Tuple

from profile_directory.profiles.models import Coordinates

logger = logging.getLogger(__name__)

DEFAULT_CITY = "New York"

CITY_ANCHORS: Dict[str, Tuple[float, float]] = {
    "New York": (40.7128, -74.0060),
    "Los Angeles": (34.0522, -118.2437),
    "Chicago": (41.8781, -87.6298),
}

_CITY_PATTERN = re.compile("|".join(re.escape(city) for city in CITY_ANCHORS))


def resolve_city(address: str) -> str:
    match = _CITY_PATTERN.search(address or "")
    return match.group(0) if match else DEFAULT_CITY


async def geocode_address(
    address: str,
    *,
    jitter_degrees: float = 0.01,
    rng: Optional[random.Random] = None,
) -> Coordinates:
    """Map an address to coordinates near its city anchor. Never fails."""
    rng = rng or random.Random()
    city = resolve_city(address)
    lat, lng = CITY_ANCHORS[city]
    coordinates = Coordinates(
        lat=lat + (rng.random() - 0.5) * jitter_degrees,
        lng=lng + (rng.random() - 0.5) * jitter_degrees,
    )
    logger.debug(f"Geocoded {address!r} near {city}: {coordinates.lat}, {coordinates.lng}")
    return coordinates
