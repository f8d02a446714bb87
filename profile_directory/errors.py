"""Exception hierarchy shared by the store, the view-state engine and the API."""

from __future__ import annotations

from typing import Dict


class ProfileDirectoryError(Exception):
    """Base class for every error raised by the package."""


class ProfileStoreError(ProfileDirectoryError):
    """The profile store could not be reached or rejected the call."""


class ProfileNotFoundError(ProfileStoreError):
    """No profile exists with the requested id."""

    def __init__(self, profile_id: int):
        super().__init__("Profile not found")
        self.profile_id = profile_id


class ProfileValidationError(ProfileDirectoryError):
    """Admin form input failed validation; nothing was written."""

    def __init__(self, fields: Dict[str, str]):
        super().__init__("Profile form has invalid fields")
        self.fields = dict(fields)


class FavoritesStorageError(ProfileDirectoryError):
    """The favorites storage could not be read or written."""


class ViewStateError(ProfileDirectoryError):
    """Invalid transition requested on the view-state engine."""


class UnknownFilterError(ViewStateError):
    def __init__(self, name: str):
        super().__init__(f"Unknown filter: {name}")
        self.name = name


class InvalidSortKeyError(ViewStateError):
    def __init__(self, key: str):
        super().__init__(f"Unknown sort key: {key}")
        self.key = key
