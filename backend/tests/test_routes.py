"""
SkateSpots Backend - API Endpoint Tests
=========================================

What:  HTTP-level tests for every route, through the real app and the SQLite
       test database.
How:   httpx AsyncClient over ASGITransport; the geocoder's transport is
       swapped for an httpx.MockTransport.
"""

import json
import uuid
from unittest.mock import patch

import httpx
import pytest

from skatespots.services.geocode_service import geocode_service

DEFAULT_IMAGE = "/images/default-spot.svg"


async def _create(client, **fields):
    response = await client.post("/api/spots", data=fields)
    assert response.status_code == 201
    return response.json()


class TestLiveness:

    @pytest.mark.asyncio
    async def test_api_test(self, test_client):
        response = await test_client.get("/api/test")
        assert response.status_code == 200
        assert response.json() == {"message": "Server is running!"}

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.get("/api/spots", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_health_reports_database(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"


class TestSpotLifecycle:
    """Create → add-image → fetch, the main flow of the frontend."""

    @pytest.mark.asyncio
    async def test_end_to_end(self, test_client, sample_image_bytes):
        created = await _create(test_client, name="Rail Park", city="Helsinki")
        assert created["imageUrl"] == [DEFAULT_IMAGE]
        assert created["name"] == "Rail Park"
        assert created["city"] == "Helsinki"
        spot_id = created["id"]

        response = await test_client.post(
            f"/api/spots/{spot_id}/add-image",
            files={"image": ("rail.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 200
        updated = response.json()
        assert len(updated["imageUrl"]) == 1
        assert updated["imageUrl"][0].startswith("/uploads/")
        assert updated["imageUrl"][0].endswith("-rail.jpg")

        response = await test_client.get(f"/api/spots/{spot_id}")
        assert response.status_code == 200
        assert response.json() == updated

    @pytest.mark.asyncio
    async def test_create_multipart_with_images_and_coords(self, test_client, sample_image_bytes):
        response = await test_client.post(
            "/api/spots",
            data={
                "name": "Plaza",
                "description": "Marble ledges",
                "ratingFlat": "4",
                "ratingCrowd": "2",
                "category": "3",
                "coords": json.dumps({"lat": 60.17, "lng": 24.94}),
            },
            files=[
                ("images", ("a.jpg", sample_image_bytes, "image/jpeg")),
                ("images", ("b.png", b"\x89PNG\r\n\x1a\n", "image/png")),
            ],
        )

        assert response.status_code == 201
        body = response.json()
        assert DEFAULT_IMAGE not in body["imageUrl"]
        assert [url.rsplit("-", 1)[-1] for url in body["imageUrl"]] == ["a.jpg", "b.png"]
        assert body["coords"] == {"lat": 60.17, "lng": 24.94}
        assert body["ratingFlat"] == 4
        assert body["ratingCrowd"] == 2
        assert body["category"] == 3

    @pytest.mark.asyncio
    async def test_create_json_body(self, test_client):
        response = await test_client.post(
            "/api/spots",
            json={"name": "Bowl", "city": "Oulu", "coords": {"lat": 65.0, "lng": 25.5}},
        )
        assert response.status_code == 201
        assert response.json()["coords"] == {"lat": 65.0, "lng": 25.5}
        assert response.json()["imageUrl"] == [DEFAULT_IMAGE]

    @pytest.mark.asyncio
    async def test_malformed_coords_are_tolerated(self, test_client):
        created = await _create(test_client, name="Mystery", coords="{not json")
        assert created["coords"] == {"lat": None, "lng": None}

    @pytest.mark.asyncio
    async def test_uncoercible_rating_is_server_error(self, test_client):
        response = await test_client.post("/api/spots", data={"name": "X", "ratingFlat": "lots"})
        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "Saving the skate spot failed."
        assert "ratingFlat" not in body["message"]

    @pytest.mark.asyncio
    async def test_fractional_category_is_kept(self, test_client):
        created = await _create(test_client, name="Mini ramp", category="2.5")
        assert created["category"] == 2.5

        fetched = await test_client.get(f"/api/spots/{created['id']}")
        assert fetched.json()["category"] == 2.5


class TestSpotLookup:

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self, test_client):
        response = await test_client.get(f"/api/spots/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert "message" in response.json()

    @pytest.mark.asyncio
    async def test_malformed_id_is_500(self, test_client):
        response = await test_client.get("/api/spots/12345")
        assert response.status_code == 500
        assert response.json()["message"] == "Error fetching the spot."

    @pytest.mark.asyncio
    async def test_search(self, test_client):
        await _create(test_client, name="park", city="Helsinki")
        await _create(test_client, name="Ledges", city="Tampere")

        all_spots = await test_client.get("/api/spots")
        assert [s["name"] for s in all_spots.json()] == ["park", "Ledges"]

        matches = await test_client.get("/api/spots", params={"q": "PARK"})
        assert [s["name"] for s in matches.json()] == ["park"]

        none = await test_client.get("/api/spots", params={"q": "nowhere"})
        assert none.status_code == 200
        assert none.json() == []

    @pytest.mark.asyncio
    async def test_store_unavailable_is_500(self, test_client):
        with patch("skatespots.database.async_session_factory", None):
            response = await test_client.get("/api/spots")
        assert response.status_code == 500
        assert response.json()["error"] == "server_error"


class TestImages:

    @pytest.mark.asyncio
    async def test_stream_image_by_index(self, test_client, sample_image_bytes):
        response = await test_client.post(
            "/api/spots",
            data={"name": "Pics"},
            files=[("images", ("shot.jpg", sample_image_bytes, "image/jpeg"))],
        )
        spot = response.json()

        image = await test_client.get(f"/api/spots/{spot['id']}/image/0")
        assert image.status_code == 200
        assert image.content == sample_image_bytes
        assert image.headers["content-type"] == "image/jpeg"

        static = await test_client.get(spot["imageUrl"][0])
        assert static.status_code == 200
        assert static.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_missing_index_is_404(self, test_client):
        spot = await _create(test_client, name="No pics")

        assert (await test_client.get(f"/api/spots/{spot['id']}/image/0")).status_code == 404
        assert (await test_client.get(f"/api/spots/{spot['id']}/image/7")).status_code == 404
        assert (await test_client.get(f"/api/spots/{spot['id']}/image/first")).status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_spot_image_is_404(self, test_client):
        assert (await test_client.get(f"/api/spots/{uuid.uuid4()}/image/0")).status_code == 404
        assert (await test_client.get("/api/spots/nope/image/0")).status_code == 404

    @pytest.mark.asyncio
    async def test_add_image_unknown_spot_is_404(self, test_client, sample_image_bytes):
        response = await test_client.post(
            f"/api/spots/{uuid.uuid4()}/add-image",
            files={"image": ("x.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_add_image_without_file_leaves_spot(self, test_client):
        spot = await _create(test_client, name="Bank")
        response = await test_client.post(f"/api/spots/{spot['id']}/add-image")
        assert response.status_code == 200
        assert response.json()["imageUrl"] == [DEFAULT_IMAGE]

    @pytest.mark.asyncio
    async def test_missing_static_file_is_404(self, test_client):
        response = await test_client.get("/uploads/does-not-exist.jpg")
        assert response.status_code == 404


class TestReverseGeocode:

    @pytest.mark.asyncio
    async def test_returns_city(self, test_client):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"address": {"city": "Helsinki"}})
        )
        with patch.object(geocode_service, "transport", transport):
            response = await test_client.get("/api/reverse", params={"lat": "60.17", "lon": "24.94"})

        assert response.status_code == 200
        assert response.json() == {"city": "Helsinki"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{"lat": "60.17"}, {"lon": "24.94"}, {}])
    async def test_missing_params_is_400_without_upstream(self, test_client, params):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        with patch.object(geocode_service, "transport", httpx.MockTransport(handler)):
            response = await test_client.get("/api/reverse", params=params)

        assert response.status_code == 400
        assert "message" in response.json()
        assert calls == []

    @pytest.mark.asyncio
    async def test_upstream_failure_is_generic_500(self, test_client):
        def handler(request):
            raise httpx.ConnectTimeout("timed out talking to 10.0.0.5", request=request)

        with patch.object(geocode_service, "transport", httpx.MockTransport(handler)):
            response = await test_client.get("/api/reverse", params={"lat": "60.17", "lon": "24.94"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "geocoding_error"
        assert "10.0.0.5" not in body["message"]


class TestFrameworkErrors:
    """Errors raised by FastAPI/Starlette use the same body as our own."""

    @pytest.mark.asyncio
    async def test_text_field_as_image_is_400(self, test_client):
        spot = await _create(test_client, name="Bank")

        response = await test_client.post(
            f"/api/spots/{spot['id']}/add-image", data={"image": "notafile"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert "image" in body["message"]
        assert "detail" not in body

    @pytest.mark.asyncio
    async def test_unknown_route_is_404_with_message(self, test_client):
        response = await test_client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert response.json()["message"]

    @pytest.mark.asyncio
    async def test_wrong_method_keeps_status(self, test_client):
        response = await test_client.delete("/api/spots")
        assert response.status_code == 405
        assert "message" in response.json()

    @pytest.mark.asyncio
    async def test_superscript_index_is_404(self, test_client):
        spot = await _create(test_client, name="Stairs")
        response = await test_client.get(f"/api/spots/{spot['id']}/image/²")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
