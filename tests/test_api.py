import pytest
from httpx import ASGITransport, AsyncClient

from profile_directory.errors import ProfileStoreError
from profile_directory.main import create_application
from profile_directory.profiles.favorites import FavoritesRepository, MemoryStorage
from profile_directory.profiles.store import InMemoryProfileStore


@pytest.fixture
def test_app(settings):
    return create_application(settings)


def _client(app):
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")


@pytest.mark.anyio
async def test_healthz(test_app):
    async with _client(test_app) as client:
        response = await client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.anyio
async def test_view_loads_on_first_access(test_app):
    async with _client(test_app) as client:
        response = await client.get("/v1/view")
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 5
    assert len(body["profiles"]) == 5
    assert body["sort_key"] == "name"
    assert body["error"] is None
    assert body["has_loaded"] is True


@pytest.mark.anyio
async def test_search_filter_scenario(test_app):
    async with _client(test_app) as client:
        response = await client.post("/v1/view/search", json={"term": "Hiking"})
        assert len(response.json()["profiles"]) == 4

        response = await client.post("/v1/view/filters/favorites/toggle")
        assert response.json()["profiles"] == []
        assert response.json()["active_filters"] == ["favorites"]

        response = await client.post("/v1/view/filters/favorites/toggle")
        assert len(response.json()["profiles"]) == 4

        response = await client.post("/v1/view/filters/clear")
        assert len(response.json()["profiles"]) == 5


@pytest.mark.anyio
async def test_unknown_filter_and_sort_key(test_app):
    async with _client(test_app) as client:
        response = await client.post("/v1/view/filters/nearby/toggle")
        assert response.status_code == 400
        assert response.json()["error"] == "unknown_filter"

        response = await client.post("/v1/view/sort", json={"key": "age"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


@pytest.mark.anyio
async def test_sort_toggles_direction(test_app):
    async with _client(test_app) as client:
        first = (await client.post("/v1/view/sort", json={"key": "rating"})).json()
        second = (await client.post("/v1/view/sort", json={"key": "rating"})).json()
    assert first["sort_direction"] == "asc"
    assert second["sort_direction"] == "desc"
    assert [p["id"] for p in first["profiles"]][0] == 4


@pytest.mark.anyio
async def test_selection_and_map_view(test_app, settings):
    async with _client(test_app) as client:
        response = await client.post("/v1/view/selection", json={"profile_id": 3})
        assert response.status_code == 200
        assert response.json()["selected_profile"]["id"] == 3

        map_view = (await client.get("/v1/view/map")).json()
        assert map_view["mode"] == "focused"
        assert map_view["displayed_ids"] == [3]
        assert map_view["zoom"] == settings.map_focused_zoom

        response = await client.post("/v1/view/show-all", json={"enabled": True})
        assert response.json()["selected_profile"] is None

        map_view = (await client.get("/v1/view/map")).json()
        assert map_view["mode"] == "fit_bounds"
        assert len(map_view["markers"]) == 5
        assert map_view["zoom"] <= settings.map_max_fit_zoom

        response = await client.delete("/v1/view/selection")
        assert response.status_code == 200


@pytest.mark.anyio
async def test_select_unknown_profile_404(test_app):
    async with _client(test_app) as client:
        response = await client.post("/v1/view/selection", json={"profile_id": 77})
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.anyio
async def test_marker_click_and_navigation(test_app):
    async with _client(test_app) as client:
        await client.post("/v1/view/show-all", json={"enabled": True})
        view = (await client.post("/v1/view/map/markers/1/click")).json()
        assert view["selected_id"] == 1

        state = (await client.get("/v1/view")).json()
        order = [p["id"] for p in state["profiles"]]
        assert state["show_all_on_map"] is False

        view = (await client.post("/v1/view/map/next")).json()
        assert view["selected_id"] == order[(order.index(1) + 1) % len(order)]

        view = (await client.post("/v1/view/map/previous")).json()
        assert view["selected_id"] == 1


@pytest.mark.anyio
async def test_favorites_toggle_round_trip(test_app):
    async with _client(test_app) as client:
        on = (await client.post("/v1/favorites/2/toggle")).json()
        assert on == {"profile_id": 2, "is_favorite": True, "favorites": [2]}

        detail = (await client.get("/v1/profiles/2")).json()
        assert detail["is_favorite"] is True

        off = (await client.post("/v1/favorites/2/toggle")).json()
        assert off["is_favorite"] is False
        assert (await client.get("/v1/favorites")).json() == {"favorites": []}


@pytest.mark.anyio
async def test_profile_detail_not_found(test_app):
    async with _client(test_app) as client:
        response = await client.get("/v1/profiles/404")
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "not_found"
    assert body["details"] == "Profile not found"


@pytest.mark.anyio
async def test_admin_list_search_and_paging(test_app):
    async with _client(test_app) as client:
        page = (await client.get("/v1/profiles", params={"page_size": 2})).json()
        assert page["total"] == 5
        assert [item["id"] for item in page["items"]] == [1, 2]

        found = (await client.get("/v1/profiles", params={"q": "kabir.das@"})).json()
        assert [item["id"] for item in found["items"]] == [5]


@pytest.mark.anyio
async def test_admin_create_requires_image(test_app):
    form = {
        "name": "No Image",
        "description": "Forgot the portrait",
        "address": "Chicago",
        "contact": "noimage@example.com",
    }
    async with _client(test_app) as client:
        response = await client.post("/v1/profiles", json=form)
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["fields"] == {"image": "Image URL is required"}

        listing = (await client.get("/v1/profiles")).json()
        assert listing["total"] == 5


@pytest.mark.anyio
async def test_admin_create_update_delete_then_refresh(test_app):
    form = {
        "name": "Grace Hopper",
        "image": "https://example.com/grace.jpg",
        "description": "Compiler pioneer",
        "address": "Arlington, New York",
        "contact": "grace@example.com",
        "interests": "Compilers, Navy",
        "rating": 5,
    }
    async with _client(test_app) as client:
        await client.get("/v1/view")

        created = await client.post("/v1/profiles", json=form)
        assert created.status_code == 201
        new_id = created.json()["id"]
        assert created.json()["coordinates"] is not None

        stale = (await client.get("/v1/view")).json()
        assert stale["total"] == 5

        fresh = (await client.post("/v1/view/refresh")).json()
        assert fresh["total"] == 6

        updated = await client.put(
            f"/v1/profiles/{new_id}", json={**form, "name": "Rear Admiral Hopper"}
        )
        assert updated.status_code == 200
        assert updated.json()["name"] == "Rear Admiral Hopper"

        missing = await client.put("/v1/profiles/999", json=form)
        assert missing.status_code == 404

        deleted = await client.delete(f"/v1/profiles/{new_id}")
        assert deleted.json() == {"success": True}
        again = await client.delete(f"/v1/profiles/{new_id}")
        assert again.status_code == 404


@pytest.mark.anyio
async def test_invalid_json_body(test_app):
    async with _client(test_app) as client:
        response = await client.post(
            "/v1/view/search",
            content=b"{oops",
            headers={"content-type": "application/json"},
        )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_json"


class BrokenStore(InMemoryProfileStore):
    async def list_profiles(self):
        raise ProfileStoreError("offline")


@pytest.mark.anyio
async def test_load_failure_surfaces_retryable_error(settings):
    app = create_application(settings, store=BrokenStore())
    async with _client(app) as client:
        body = (await client.get("/v1/view")).json()
        assert body["error"] == "Failed to load profiles. Please try again later."
        assert body["profiles"] == []
        assert body["has_loaded"] is False

        dismissed = (await client.post("/v1/view/error/dismiss")).json()
        assert dismissed["error"] is None


@pytest.mark.anyio
async def test_unreadable_favorites_only_fail_favorite_actions(settings):
    favorites = FavoritesRepository(MemoryStorage({"favoriteProfiles": "not json"}))
    app = create_application(settings, favorites=favorites)
    async with _client(app) as client:
        response = await client.post("/v1/favorites/2/toggle")
        assert response.status_code == 503
        assert response.json()["error"] == "storage_unavailable"

        response = await client.post("/v1/view/filters/favorites/toggle")
        assert response.status_code == 503

        response = await client.post("/v1/view/search", json={"term": "Kerala"})
        assert response.status_code == 200
        assert response.json()["active_filters"] == []
        assert [p["id"] for p in response.json()["profiles"]] == [5]

        response = await client.post("/v1/view/sort", json={"key": "rating"})
        assert response.status_code == 200

        response = await client.post("/v1/view/refresh")
        assert response.status_code == 200
        assert response.json()["favorites"] == []
        assert response.json()["total"] == 5
