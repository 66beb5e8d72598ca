from datetime import datetime

import pytest

from aquarium_health.core.config import get_thresholds
from aquarium_health.main import app
from aquarium_health.schemas import AnalysisThresholds

HEALTHY = {"phValue": 7.2, "tempCelsius": 25.5, "ammoniaPPM": 0.3, "fishCount": 35}


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "aquarium-health-service"}


def test_optimal_tank(client):
    resp = client.post("/aquarium/analyze", params={"tankId": "TANK_01"}, json=HEALTHY)
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "analysis_complete"
    assert data["tankId"] == "TANK_01"
    assert data["healthStatus"] == "optimal"
    assert data["warningsDetected"] is False
    assert data["metricsProcessed"] == {"ph": 7.2, "temperature": 25.5, "ammonia": 0.3, "population": 35}
    ts = datetime.fromisoformat(data["evaluationTimestamp"].replace("Z", "+00:00"))
    assert ts.utcoffset().total_seconds() == 0


def test_tank_requiring_attention(client, caplog):
    body = {"phValue": 9.5, "tempCelsius": 30, "ammoniaPPM": 0.8, "fishCount": 60}
    with caplog.at_level("INFO"):
        resp = client.post("/aquarium/analyze", params={"tankId": "TANK_02"}, json=body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["healthStatus"] == "requires_attention"
    assert data["warningsDetected"] is True
    assert data["metricsProcessed"]["population"] == 60

    warnings = [r.getMessage() for r in caplog.records if r.levelname == "WARNING"]
    assert len(warnings) == 3
    assert any("high population density" in r.getMessage() for r in caplog.records if r.levelname == "INFO")


def test_tank_id_is_optional(client):
    resp = client.post("/aquarium/analyze", json=HEALTHY)
    assert resp.status_code == 200
    assert resp.json()["tankId"] is None


def test_missing_fish_count(client):
    body = {k: v for k, v in HEALTHY.items() if k != "fishCount"}
    resp = client.post("/aquarium/analyze", params={"tankId": "T"}, json=body)
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["missingOrInvalidFields"] == ["fishCount"]
    assert detail["message"] == "Required fields missing or invalid: fishCount"


def test_invalid_values_listed_in_order(client):
    body = {"phValue": 0, "tempCelsius": 25.0, "ammoniaPPM": -0.2}
    resp = client.post("/aquarium/analyze", json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"]["missingOrInvalidFields"] == ["phValue", "ammoniaPPM", "fishCount"]


def test_mistyped_field_is_rejected(client):
    body = {**HEALTHY, "tempCelsius": "warm"}
    resp = client.post("/aquarium/analyze", json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"]["missingOrInvalidFields"] == ["tempCelsius"]


def test_empty_body_never_reaches_evaluation(client, monkeypatch):
    def _boom(*args, **kwargs):
        raise AssertionError("evaluate should not be called")

    monkeypatch.setattr("aquarium_health.api.routes.evaluate", _boom)
    resp = client.post("/aquarium/analyze", content=b"   ", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["message"] == "Metrics payload is required"


def test_malformed_json(client):
    resp = client.post("/aquarium/analyze", content=b"{not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["message"] == "Malformed metrics data"


def test_null_body(client):
    resp = client.post("/aquarium/analyze", content=b"null", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["message"] == "Invalid JSON structure"


def test_thresholds_come_from_dependency(client):
    app.dependency_overrides[get_thresholds] = lambda: AnalysisThresholds(overcrowding_threshold=10, ammonia_danger_level=0.2)
    resp = client.post("/aquarium/analyze", json=HEALTHY)
    assert resp.status_code == 200
    assert resp.json()["healthStatus"] == "requires_attention"


def test_unexpected_failure_is_500(client, monkeypatch, caplog):
    def _boom(*args, **kwargs):
        raise RuntimeError("sensor table corrupted")

    monkeypatch.setattr("aquarium_health.api.routes.evaluate", _boom)
    resp = client.post("/aquarium/analyze", params={"tankId": "T9"}, json=HEALTHY)
    assert resp.status_code == 500
    assert any("Analysis failed for tank T9" in r.getMessage() for r in caplog.records)


class TestFunctionKey:
    @pytest.fixture
    def keyed(self, client, settings):
        settings.FUNCTION_KEY = "s3cret"
        return client

    def test_missing_key(self, keyed):
        resp = keyed.post("/aquarium/analyze", json=HEALTHY)
        assert resp.status_code == 401

    def test_wrong_key(self, keyed):
        resp = keyed.post("/aquarium/analyze", json=HEALTHY, headers={"x-functions-key": "nope"})
        assert resp.status_code == 401

    def test_header_key(self, keyed):
        resp = keyed.post("/aquarium/analyze", json=HEALTHY, headers={"x-functions-key": "s3cret"})
        assert resp.status_code == 200

    def test_query_key(self, keyed):
        resp = keyed.post("/aquarium/analyze", params={"code": "s3cret", "tankId": "A"}, json=HEALTHY)
        assert resp.status_code == 200
        assert resp.json()["tankId"] == "A"

    def test_health_stays_open(self, keyed):
        assert keyed.get("/health").status_code == 200


def test_boolean_readings_are_rejected(client):
    body = {**HEALTHY, "ammoniaPPM": False, "fishCount": True}
    resp = client.post("/aquarium/analyze", json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"]["missingOrInvalidFields"] == ["ammoniaPPM", "fishCount"]
