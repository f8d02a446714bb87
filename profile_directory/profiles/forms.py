"""Admin form validation and submission."""

from __future__ import annotations

import logging
import random
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from profile_directory.errors import ProfileValidationError
from profile_directory.profiles.geocoding import geocode_address
from profile_directory.profiles.models import Profile
from profile_directory.profiles.store import ProfileStore

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"^https?://.+")


def _required(value: str, message: str) -> str:
    if not value.strip():
        raise ValueError(message)
    return value.strip()


class ProfileFormInput(BaseModel):
    """Fields an administrator submits when creating or editing a profile."""

    model_config = ConfigDict(extra="ignore", validate_default=True)

    name: str = ""
    image: str = ""
    description: str = ""
    address: str = ""
    contact: str = ""
    interests: List[str] = Field(default_factory=list)
    rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _required(v, "Name is required")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return _required(v, "Description is required")

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _required(v, "Address is required")

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: str) -> str:
        v = _required(v, "Image URL is required")
        if not URL_PATTERN.match(v):
            raise ValueError("Must be a valid URL starting with http:// or https://")
        return v

    @field_validator("contact")
    @classmethod
    def validate_contact(cls, v: str) -> str:
        v = _required(v, "Contact information is required")
        if "@" not in v:
            raise ValueError("Please enter a valid email address")
        return v

    @field_validator("interests", mode="before")
    @classmethod
    def split_interests(cls, value: Any) -> List[str]:
        """Accept a comma-separated string as entered in the form."""
        if value is None:
            return []
        if isinstance(value, str):
            items = value.split(",")
        else:
            items = [str(item) for item in value]
        return [item.strip() for item in items if item.strip()]


def field_errors(exc: ValidationError) -> Dict[str, str]:
    """Collapse a pydantic error list into one message per form field."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "__root__"
        if field in errors:
            continue
        ctx_error = (error.get("ctx") or {}).get("error")
        errors[field] = str(ctx_error) if ctx_error is not None else error["msg"]
    return errors


def validate_profile_form(data: Dict[str, Any]) -> ProfileFormInput:
    """Validate raw form data, raising ProfileValidationError with field messages."""
    try:
        return ProfileFormInput.model_validate(data)
    except ValidationError as exc:
        fields = field_errors(exc)
        logger.info(f"Profile form rejected: {', '.join(sorted(fields))}")
        raise ProfileValidationError(fields) from exc


class ProfileFormService:
    """Validates, geocodes and persists admin form submissions."""

    def __init__(
        self,
        store: ProfileStore,
        *,
        jitter_degrees: float = 0.01,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.jitter_degrees = jitter_degrees
        self.rng = rng

    async def submit(
        self, data: Dict[str, Any], profile_id: Optional[int] = None
    ) -> Profile:
        """
        Create a profile, or update ``profile_id`` when given.

        Raises:
            ProfileValidationError: Before any store call when fields are invalid
            ProfileNotFoundError: When updating an unknown profile
        """
        form = validate_profile_form(data)
        coordinates = await geocode_address(
            form.address, jitter_degrees=self.jitter_degrees, rng=self.rng
        )
        payload = form.model_dump()
        if "rating" not in form.model_fields_set:
            payload.pop("rating")
        payload["coordinates"] = coordinates.model_dump()

        if profile_id is not None:
            return await self.store.update_profile(profile_id, payload)
        return await self.store.create_profile(payload)
