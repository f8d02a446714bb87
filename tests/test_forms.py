"""Tests for admin form validation and submission."""

import random

import pytest

from profile_directory.errors import ProfileNotFoundError, ProfileValidationError
from profile_directory.profiles.forms import ProfileFormService, validate_profile_form


@pytest.fixture
def valid_form():
    return {
        "name": "Ada Lovelace",
        "image": "https://example.com/ada.jpg",
        "description": "Analyst of engines",
        "address": "10 Downing St, New York",
        "contact": "ada@example.com",
        "interests": "Mathematics, Poetry , ",
    }


@pytest.fixture
def form_service(store):
    return ProfileFormService(store, rng=random.Random(1))


def test_valid_form_normalizes_interests(valid_form):
    form = validate_profile_form(valid_form)
    assert form.interests == ["Mathematics", "Poetry"]
    assert form.rating is None


def test_missing_fields_reported_per_field():
    with pytest.raises(ProfileValidationError) as excinfo:
        validate_profile_form({})

    assert excinfo.value.fields == {
        "name": "Name is required",
        "image": "Image URL is required",
        "description": "Description is required",
        "address": "Address is required",
        "contact": "Contact information is required",
    }


def test_image_and_contact_formats(valid_form):
    valid_form["image"] = "ftp://example.com/x.png"
    valid_form["contact"] = "not-an-email"

    with pytest.raises(ProfileValidationError) as excinfo:
        validate_profile_form(valid_form)

    fields = excinfo.value.fields
    assert fields["image"] == "Must be a valid URL starting with http:// or https://"
    assert fields["contact"] == "Please enter a valid email address"
    assert "name" not in fields


def test_rating_out_of_range(valid_form):
    valid_form["rating"] = 7
    with pytest.raises(ProfileValidationError) as excinfo:
        validate_profile_form(valid_form)
    assert set(excinfo.value.fields) == {"rating"}


@pytest.mark.anyio
async def test_missing_image_blocks_store_mutation(form_service, store, valid_form):
    del valid_form["image"]
    before = await store.list_profiles()

    with pytest.raises(ProfileValidationError) as excinfo:
        await form_service.submit(valid_form)

    assert excinfo.value.fields == {"image": "Image URL is required"}
    assert await store.list_profiles() == before


@pytest.mark.anyio
async def test_submit_creates_geocoded_profile(form_service, store, valid_form):
    profile = await form_service.submit(valid_form)

    assert profile.id == 6
    assert profile.has_coordinates
    assert abs(profile.coordinates.lat - 40.7128) < 0.01
    assert profile.interests == ["Mathematics", "Poetry"]
    assert (await store.get_profile(6)).name == "Ada Lovelace"


@pytest.mark.anyio
async def test_submit_update_keeps_rating(form_service, store, valid_form):
    profile = await form_service.submit(valid_form, profile_id=1)

    assert profile.id == 1
    assert profile.name == "Ada Lovelace"
    assert profile.rating == 4.5


@pytest.mark.anyio
async def test_submit_update_unknown_profile(form_service, valid_form):
    with pytest.raises(ProfileNotFoundError):
        await form_service.submit(valid_form, profile_id=404)
