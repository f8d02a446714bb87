"""Profile data models for the directory."""

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Coordinates(BaseModel):
    """Latitude/longitude pair used for map placement."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lng: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")


class Profile(BaseModel):
    """A single directory entry."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Unique identifier assigned by the store")
    name: str = Field(..., description="Display name")
    description: str = Field(default="", description="Short biography")
    address: str = Field(default="", description="Free-form postal address")
    image: str = Field(default="", description="Portrait URL")
    contact: str = Field(default="", description="Email-like contact string")
    rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    interests: List[str] = Field(default_factory=list)
    coordinates: Optional[Coordinates] = Field(
        default=None, description="Required for map display"
    )

    @field_validator("interests", mode="before")
    @classmethod
    def normalize_interests(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return [str(item) for item in value]

    @property
    def has_coordinates(self) -> bool:
        """True when the profile can be placed on the map."""
        if self.coordinates is None:
            return False
        return math.isfinite(self.coordinates.lat) and math.isfinite(
            self.coordinates.lng
        )

    def with_updates(self, data: Dict[str, Any]) -> "Profile":
        """Return a new profile with ``data`` merged over the current fields."""
        merged = self.model_dump()
        merged.update({key: value for key, value in data.items() if key != "id"})
        return Profile.model_validate(merged)


class ProfileSummary(BaseModel):
    """Compact row used by the admin table."""

    id: int
    name: str
    address: str
    contact: str
    image: str

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileSummary":
        return cls(
            id=profile.id,
            name=profile.name,
            address=profile.address,
            contact=profile.contact,
            image=profile.image,
        )
