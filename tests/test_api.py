"""
tests/test_api.py
HTTP surface: request validation, camelCase payloads and the health check.
"""
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).parent.parent))

import api.routes as routes
from api.app import create_app

URL = "/api/v1/rates/manual-quote"


@pytest.fixture
def client(monkeypatch, engine):
    monkeypatch.setattr(routes, "_engine", engine)
    return TestClient(create_app())


class TestManualQuote:

    def test_free_text_air(self, client):
        resp = client.post(URL, json={"freeText": "10kg from China to Lagos by air"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["quote"]["mode"] == "air"
        assert body["quote"]["chargeableWeightKg"] >= 45
        assert body["quote"]["breakdown"]["total"]["currency"] == "NGN"
        assert body["summary"].startswith("Air freight estimate for China → Lagos")
        assert "missingFields" not in body

    def test_structured_ground(self, client):
        resp = client.post(URL, json={
            "mode": "ground", "origin": "Lagos", "destination": "Kano", "distanceKm": 1000,
        })
        body = resp.json()
        assert body["status"] == "ok"
        assert body["quote"]["breakdown"]["total"]["amount"] == pytest.approx(372_122.52, abs=0.01)
        assert "chargeableWeightKg" not in body["quote"]

    def test_clarification(self, client):
        resp = client.post(URL, json={"freeText": "Ocean shipment from China to Lagos"})
        body = resp.json()
        assert resp.status_code == 200
        assert body["status"] == "needs_clarification"
        assert body["missingFields"] == ["containerType"]
        assert "container size" in body["summary"]

    def test_same_location_error(self, client):
        resp = client.post(URL, json={"origin": "Lagos", "destination": "Lagos", "mode": "parcel", "weightKg": 1})
        body = resp.json()
        assert resp.status_code == 200
        assert body["status"] == "error"
        assert body["message"].startswith("Origin and destination cannot be the same")

    def test_nested_fields(self, client):
        resp = client.post(URL, json={
            "mode": "air", "origin": "China", "destination": "Lagos", "weightKg": 20,
            "dimensionsCm": {"length": 120, "width": 80, "height": 100}, "isExpress": True,
        })
        body = resp.json()
        # 120×80×100 / 6000 = 160 kg
        assert body["quote"]["chargeableWeightKg"] == 160

    def test_ground_with_coordinates(self, client):
        resp = client.post(URL, json={
            "mode": "ground", "origin": "Depot A", "destination": "Depot B",
            "start": {"lat": 0, "lng": 0}, "end": {"lat": 0, "lng": 1},
        })
        body = resp.json()
        assert body["status"] == "ok"
        assert body["quote"]["breakdown"]["assumptions"][0] == "Distance source: haversine (111.19 km)"

    @pytest.mark.parametrize("payload", [
        {"mode": "boat"},
        {"weightKg": 0},
        {"containerType": "45ft"},
        {"start": {"lat": 91, "lng": 0}},
        {"dimensionsCm": {"length": 0, "width": 1, "height": 1}},
    ])
    def test_invalid_payloads_are_rejected(self, client, payload):
        assert client.post(URL, json=payload).status_code == 422


class TestHealth:

    def test_health(self, client):
        body = client.get("/api/v1/health").json()
        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"
        assert body["extractor"] == "RegexTextExtractor"


class TestUnhandledErrors:

    def test_internal_details_stay_off_the_wire(self, monkeypatch, engine):
        def explode(request):
            raise RuntimeError("secret stack detail")

        monkeypatch.setattr(routes, "_engine", engine)
        monkeypatch.setattr(routes, "summarize_response", explode)
        client = TestClient(create_app(), raise_server_exceptions=False)

        resp = client.post(URL, json={"mode": "ground", "origin": "Lagos", "destination": "Kano", "distanceKm": 10})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "Internal server error"}
        assert "secret" not in resp.text
