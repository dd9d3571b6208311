"""
Tests for the MediScout HTTP API.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import csv
import io

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client():
    import server
    from mediscout.config import Settings
    from mediscout.db import MemoryStore
    from mediscout.engines import RandomSource
    from mediscout.predictor import SymptomMatcher

    settings = Settings()
    settings.records_per_condition = 5
    server.init_state(
        store=MemoryStore(),
        rng=RandomSource(42),
        matcher=SymptomMatcher(delay_seconds=0),
        settings=settings,
    )
    return TestClient(server.app)


def register(client, username="asha", password="secret"):
    response = client.post("/api/auth/register", json={
        "username": username,
        "password": password,
        "name": "Asha",
        "age": 29,
        "gender": "Female",
        "location": "Lahore",
    })
    assert response.status_code == 200
    return response.json()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


class TestHealth:

    def test_health_check(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAuthEndpoints:
    """Test registration, login and sessions over HTTP."""

    def test_register(self, client):
        data = register(client)
        assert data["access_token"]
        assert data["message"] == "Welcome, Asha!"
        assert data["user"]["username"] == "asha"
        assert "password" not in data["user"]

    def test_register_duplicate(self, client):
        register(client)
        response = client.post("/api/auth/register", json={"username": "asha", "password": "x"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Username already exists."

    def test_login(self, client):
        registered = register(client)
        response = client.post("/api/auth/login", json={"username": "asha", "password": "secret"})
        assert response.status_code == 200
        data = response.json()
        assert data["user"] == registered["user"]
        assert data["access_token"] != registered["access_token"]

    def test_login_wrong_password(self, client):
        register(client)
        response = client.post("/api/auth/login", json={"username": "asha", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password."

    def test_accounts_share_server_sessions(self, client):
        import server

        assert server.app.state.accounts.sessions is server.app.state.sessions
        token = register(client)["access_token"]
        assert server.app.state.sessions.get(token) is not None

    def test_me_requires_token(self, client):
        assert client.get("/api/auth/me").status_code == 401
        assert client.get("/api/auth/me", headers=auth("bogus")).status_code == 401

    def test_me_and_logout(self, client):
        token = register(client)["access_token"]
        response = client.get("/api/auth/me", headers=auth(token))
        assert response.status_code == 200
        assert response.json()["name"] == "Asha"

        assert client.post("/api/auth/logout", headers=auth(token)).json() == {"status": "logged_out"}
        assert client.get("/api/auth/me", headers=auth(token)).status_code == 401


class TestRecordEndpoints:
    """Test patient self-reports."""

    def test_submit_requires_login(self, client):
        response = client.post("/api/records", json={"symptoms": "cough"})
        assert response.status_code == 401

    def test_submit_empty_symptoms(self, client):
        token = register(client)["access_token"]
        response = client.post("/api/records", json={"symptoms": ""}, headers=auth(token))
        assert response.status_code == 400
        assert response.json()["detail"] == "Please describe your symptoms."

    def test_submit_and_list(self, client):
        token = register(client)["access_token"]
        response = client.post("/api/records", headers=auth(token), json={
            "symptoms": "High fever, headache, rash for 3 days",
            "temperature": "39.2",
            "image_name": "arm.jpg",
            "image_type": "image/jpeg",
            "image_size": 1024,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["prediction"]["prediction"] == "Febrile Illness (Suspected Vector-borne)"
        assert data["record"]["imageFile"] == {"name": "arm.jpg", "type": "image/jpeg", "size": 1024}
        assert data["record"]["aiPrediction"]["riskScore"] == 7.0

        client.post("/api/records", headers=auth(token), json={"symptoms": "cough"})

        listing = client.get("/api/records", headers=auth(token)).json()
        assert listing["total"] == 2
        assert [r["symptoms"] for r in listing["records"]] == [
            "High fever, headache, rash for 3 days",
            "cough",
        ]

    def test_records_survive_new_login(self, client):
        token = register(client)["access_token"]
        client.post("/api/records", headers=auth(token), json={"symptoms": "cough"})

        login = client.post("/api/auth/login", json={"username": "asha", "password": "secret"}).json()
        assert len(login["user"]["healthRecords"]) == 1


class TestPredictEndpoint:

    def test_anonymous_predict(self, client):
        response = client.post("/api/predict", json={"symptoms": "cough and fever"})
        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"prediction", "advice", "confidence", "imageAnalysis"}
        assert 0.4 <= data["confidence"] <= 0.95

    def test_predict_empty(self, client):
        assert client.post("/api/predict", json={"symptoms": "  "}).status_code == 400


class TestCohortEndpoints:
    """Test the health-worker dashboard API."""

    def test_cohort_is_cached(self, client):
        first = client.get("/api/cohort", params={"limit": 200}).json()
        second = client.get("/api/cohort", params={"limit": 200}).json()
        # Nine families of five plus one tuberculosis case
        assert first["total"] == 46
        assert [r["id"] for r in first["records"]] == [r["id"] for r in second["records"]]

    def test_cohort_paging(self, client):
        data = client.get("/api/cohort", params={"limit": 10, "offset": 40}).json()
        assert len(data["records"]) == 6
        assert data["offset"] == 40

    def test_regenerate(self, client):
        before = client.get("/api/cohort", params={"limit": 200}).json()
        response = client.post("/api/cohort/regenerate")
        assert response.json() == {"status": "regenerated", "total": 46}
        after = client.get("/api/cohort", params={"limit": 200}).json()
        assert [r["id"] for r in after["records"]] != [r["id"] for r in before["records"]]

    def test_export_csv(self, client):
        response = client.get("/api/cohort/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "mediscout_synthetic_data.csv" in response.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(response.text, newline="")))
        assert rows[0][:5] == ["id", "date", "age", "gender", "location"]
        assert len(rows) == 47

    def test_stats(self, client):
        data = client.get("/api/cohort/stats").json()
        assert data["total_patients"] == 46
        assert sum(r["count"] for r in data["risk_levels"]) == 46
        assert sum(r["count"] for r in data["age_groups"]) == 46
        assert sum(r["count"] for r in data["locations"]) == 46
        assert len(data["conditions"]) <= 10

    def test_impact(self, client):
        data = client.get("/api/cohort/impact").json()
        assert data["avg_time_to_identify_baseline"] == 72
        assert data["avg_time_to_identify_ai"] == 6
        assert data["ai_identified_high_risk"] <= data["total_high_risk"]

    def test_search(self, client):
        data = client.get("/api/cohort/search", params={
            "condition": "Immunization Status Check",
            "sort": "simulatedRiskScore",
            "descending": True,
        }).json()
        assert data["total"] == 5
        scores = [r["simulatedRiskScore"] for r in data["records"]]
        assert scores == sorted(scores, reverse=True)

    def test_search_bad_sort(self, client):
        response = client.get("/api/cohort/search", params={"sort": "vitals"})
        assert response.status_code == 400


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
