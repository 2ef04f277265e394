import json

import pytest
from fastapi.testclient import TestClient

from app.config import get_settings
from app.main import app


class TestSearchEndpoint:
    def test_search_returns_camel_case_summaries(self, client: TestClient):
        response = client.post("/api/v1/hotels/search", json={"destination": "London"})

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["count"] == 2
        assert data["suppliers"] == ["LOCAL"]
        first = data["hotels"][0]
        assert first["id"] == "hotel-ldn-002"
        assert first["startingRate"] == 180.0
        assert first["supplierCode"] == "LOCAL"
        assert first["minRatePlan"]["boardType"] == "BED_AND_BREAKFAST"
        assert response.headers["X-RateLimit-Remaining"] == "29"

    def test_search_filters_and_sorts(self, client: TestClient):
        response = client.post(
            "/api/v1/hotels/search",
            json={"sortBy": "price-asc", "maxPrice": 150, "checkIn": "2030-05-01", "checkOut": "2030-05-03"},
        )

        assert response.status_code == 200, response.text
        assert [h["id"] for h in response.json()["hotels"]] == ["hotel-ldn-001", "hotel-par-001"]

    def test_unknown_supplier_falls_back_to_local(self, client: TestClient):
        response = client.post("/api/v1/hotels/search", json={"destination": "Paris", "supplier": "EXPEDIA"})

        assert response.status_code == 200
        assert response.json()["suppliers"] == ["LOCAL"]
        assert [h["id"] for h in response.json()["hotels"]] == ["hotel-par-001"]

    @pytest.mark.parametrize(
        "payload",
        [
            {"destination": "London", "unexpected": True},
            {"adults": 0},
            {"sortBy": "cheapest"},
            {"limit": 500},
        ],
    )
    def test_invalid_payloads_are_rejected(self, client: TestClient, payload):
        response = client.post("/api/v1/hotels/search", json=payload)

        assert response.status_code == 422

    def test_rate_limit(self, settings_factory):
        settings = settings_factory(search_rate_limit=2, search_rate_window_seconds=30)
        app.dependency_overrides[get_settings] = lambda: settings
        try:
            with TestClient(app) as client:
                statuses = [
                    client.post("/api/v1/hotels/search", json={"destination": "London"}).status_code
                    for _ in range(2)
                ]
                blocked = client.post("/api/v1/hotels/search", json={"destination": "London"})
                other_client = client.post(
                    "/api/v1/hotels/search",
                    json={"destination": "London"},
                    headers={"X-Forwarded-For": "198.51.100.7"},
                )
        finally:
            app.dependency_overrides.clear()

        assert statuses == [200, 200]
        assert blocked.status_code == 429
        assert blocked.headers["Retry-After"] == "30"
        assert other_client.status_code == 200

    def test_multi_supplier_search(self, client: TestClient):
        response = client.post("/api/v1/hotels/search/multi", json={"destination": "London"})

        assert response.status_code == 200
        data = response.json()
        assert [h["id"] for h in data["hotels"]] == ["hotel-ldn-001", "hotel-ldn-002"]
        assert data["suppliers"] == ["LOCAL"]


class TestHotelDetailsEndpoint:
    def test_details_include_rooms_and_rate_plans(self, client: TestClient):
        response = client.get("/api/v1/hotels/hotel-ldn-001")

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["reviewScore"] == 8.9
        assert len(data["images"]) == 2
        assert [room["id"] for room in data["roomTypes"]] == ["room-ldn-001-dbl", "room-ldn-001-ste"]
        flex = data["roomTypes"][0]["ratePlans"][0]
        assert flex["totalAmount"] == 180.0
        assert flex["cancellationPolicy"]["refundableUntilHours"] == 24
        assert flex["addOns"][0]["additionalPrice"] == 18.0

    def test_details_by_slug(self, client: TestClient):
        response = client.get("/api/v1/hotels/kensington-gardens-hotel")

        assert response.status_code == 200
        assert response.json()["id"] == "hotel-ldn-002"

    def test_unknown_hotel(self, client: TestClient):
        response = client.get("/api/v1/hotels/hotel-nowhere")

        assert response.status_code == 404
        assert response.json()["detail"] == "Hotel not found"


class TestBookingSelectionEndpoint:
    def test_selection_prices_stay(self, client: TestClient):
        response = client.get(
            "/api/v1/booking-selection",
            params={
                "hotelId": "hotel-ldn-001",
                "ratePlanId": "rp-ldn-001-dbl-flex",
                "checkIn": "2030-05-01",
                "checkOut": "2030-05-03",
                "addOns": json.dumps([{"id": "ao-ldn-001-breakfast", "quantity": 1}]),
            },
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["hotel"]["id"] == "hotel-ldn-001"
        assert data["roomType"]["id"] == "room-ldn-001-dbl"
        assert data["ratePlan"]["cancellationDeadline"] is not None
        assert data["dates"] == {"checkIn": "2030-05-01", "checkOut": "2030-05-03", "nights": 2}
        assert data["guests"] == {"adults": 2, "children": 0, "rooms": 1}
        assert [a["id"] for a in data["addOns"]["selected"]] == ["ao-ldn-001-breakfast"]
        assert data["pricing"] == {
            "nightlyRate": 150.0,
            "subtotal": 300.0,
            "taxes": 60.0,
            "fees": 0.0,
            "addOns": 18.0,
            "total": 378.0,
        }

    def test_malformed_add_ons_are_ignored(self, client: TestClient):
        response = client.get(
            "/api/v1/booking-selection",
            params={"hotelId": "hotel-ldn-001", "ratePlanId": "rp-ldn-001-dbl-nr", "addOns": "{oops"},
        )

        assert response.status_code == 200
        assert response.json()["addOns"]["selected"] == []
        assert response.json()["ratePlan"]["cancellationDeadline"] is None

    def test_unknown_rate_plan(self, client: TestClient):
        response = client.get(
            "/api/v1/booking-selection",
            params={"hotelId": "hotel-ldn-001", "ratePlanId": "rp-missing"},
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Selection not available"

    def test_hotel_id_is_required(self, client: TestClient):
        response = client.get("/api/v1/booking-selection", params={"ratePlanId": "rp-ldn-001-dbl-flex"})

        assert response.status_code == 422
