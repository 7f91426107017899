"""
Tests for the noise survey REST API.

Uses FastAPI's TestClient against an app built from default config.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import AS_OF, audiogram, audiometry_test, device, employee, measurement

from noisesurvey import __version__
from noisesurvey.api.app import create_app
from noisesurvey.bootstrap.config import NoiseSurveyConfig


@pytest.fixture
def client():
    return TestClient(create_app(NoiseSurveyConfig()))


class TestAppEndpoints:
    """Tests for health and index endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__
        assert data["environment"] == "development"

    def test_index(self, client):
        data = client.get("/").json()
        assert data["endpoints"]["api"] == "/api/v1"

    def test_docs_can_be_disabled(self):
        config = NoiseSurveyConfig()
        config.api.enable_docs = False
        response = TestClient(create_app(config)).get("/docs")
        assert response.status_code == 404


# =============================================================================
# SURVEY
# =============================================================================

class TestSurveyEndpoints:
    """Tests for whole-survey endpoints."""

    def test_validate(self, client, red_zone_survey):
        response = client.post("/api/v1/survey/validate", json={
            "survey": red_zone_survey,
            "as_of": AS_OF.isoformat(),
        })
        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is False
        assert data["summary"]["critical_count"] == 3
        assert data["critical_issues"][0]["area_key"] == {"main": 0}

    def test_validate_compliant(self, client, compliant_survey):
        response = client.post("/api/v1/survey/validate", json={
            "survey": compliant_survey,
            "as_of": AS_OF.isoformat(),
        })
        assert response.json()["is_valid"] is True

    def test_validate_rejects_non_object(self, client):
        response = client.post("/api/v1/survey/validate", json={"survey": [1, 2]})
        assert response.status_code == 422

    def test_delete_area(self, client, nested_survey):
        response = client.post("/api/v1/survey/areas/delete", json={
            "survey": nested_survey,
            "area_key": {"main": 0, "sub": 0},
        })
        assert response.status_code == 200
        data = response.json()
        assert [a["name"] for a in data["areas"][0]["subAreas"]] == ["Crusher"]
        assert data["commentsByArea"] == {
            '{"main":0,"sub":0}': "crusher",
            '{"main":0,"sub":0,"ss":0}': "primary",
            '{"main":1}': "office",
        }

    def test_delete_area_by_key_string(self, client, nested_survey):
        response = client.post("/api/v1/survey/areas/delete", json={
            "survey": nested_survey,
            "area_key": '{"main":1}',
        })
        assert response.status_code == 200
        assert len(response.json()["areas"]) == 1

    def test_delete_missing_area(self, client, nested_survey):
        response = client.post("/api/v1/survey/areas/delete", json={
            "survey": nested_survey,
            "area_key": {"main": 5},
        })
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "AREA_404"

    def test_delete_bad_key(self, client, nested_survey):
        response = client.post("/api/v1/survey/areas/delete", json={
            "survey": nested_survey,
            "area_key": "not a key",
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "AREA_400"


# =============================================================================
# EXPOSURE AND PROTECTION
# =============================================================================

class TestExposureEndpoints:
    """Tests for exposure endpoints."""

    def test_summary_from_readings(self, client):
        response = client.post("/api/v1/exposure/summary", json={"readings": ["90", "92", "88"]})
        assert response.status_code == 200
        data = response.json()
        assert data["lex8h"] == 90.3
        assert data["zone"]["zone"] == "red"
        assert data["compliance"]["level"] == "limit-exceeded"

    def test_hours_validated(self, client):
        response = client.post("/api/v1/exposure/summary", json={"readings": [90], "exposure_hours": 0})
        assert response.status_code == 422

    def test_measurement(self, client):
        response = client.post("/api/v1/exposure/measurement", json={
            "measurement": measurement(["86"], exposure="", shift="8"),
        })
        data = response.json()
        assert data["exposure_hours"] == 8.0
        assert data["zone"]["zone"] == "orange"


class TestProtectionEndpoints:
    """Tests for hearing protection endpoints."""

    def test_summary(self, client):
        response = client.post("/api/v1/protection/summary", json={
            "actual_lex8h": 90.3,
            "devices": [device("28")],
        })
        data = response.json()
        assert data["protected_lex8h"] == 66.3
        assert data["adequacy"]["level"] == "excellent"

    def test_summary_nothing_to_assess(self, client):
        response = client.post("/api/v1/protection/summary", json={"actual_lex8h": 90.3})
        assert response.status_code == 200
        assert response.json() is None

    def test_recommend(self, client):
        response = client.post("/api/v1/protection/recommend", json={
            "actual_lex8h": 100.0,
            "devices": [device("30"), device("20")],
        })
        data = response.json()
        assert data["recommendation"]["best_device_index"] == 1
        assert [a["level"] for a in data["assessments"]] == ["over-protected", "acceptable"]


# =============================================================================
# AUDIOMETRY
# =============================================================================

class TestAudiometryEndpoints:
    """Tests for audiometry endpoints."""

    def test_summary(self, client):
        response = client.post("/api/v1/audiometry/summary", json={
            "employee": employee(),
            "as_of": AS_OF.isoformat(),
        })
        assert response.json()["has_baseline"] is False

    def test_sts(self, client):
        response = client.post("/api/v1/audiometry/sts", json={
            "baseline": audiogram(10),
            "current": audiogram(20),
        })
        data = response.json()
        assert data["has_sts"] is True
        assert data["severity"] == "mild"

    def test_validate_audiogram(self, client):
        response = client.post("/api/v1/audiometry/validate", json={"audiogram": {"500": {"left": 0}}})
        data = response.json()
        assert data["is_valid"] is False
        assert "Missing data for 8000 Hz" in data["errors"]

    def test_add_test_sets_sts(self, client):
        emp = employee(baseline=audiometry_test("Baseline", "2024-01-10", 10))
        response = client.post("/api/v1/audiometry/tests", json={
            "employee": emp,
            "test": audiometry_test("Annual", "2025-01-10", 22),
        })
        data = response.json()
        assert data["hasSTS"] is True
        assert data["stsDate"] == "2025-01-10"
        assert len(data["periodicTests"]) == 1
