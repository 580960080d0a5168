import pytest
from fastapi.testclient import TestClient

from maintenance_engine.api.maintenance.deps import get_predictor, get_scheduler
from maintenance_engine.main import app


@pytest.fixture
def client(predictor, scheduler):
    app.dependency_overrides[get_predictor] = lambda: predictor
    app.dependency_overrides[get_scheduler] = lambda: scheduler
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def roster(client):
    res = client.post("/maintenance/roster", json={
        "technicians": [
            {"id": "t-1", "name": "Alice", "skills": ["generator"], "current_workload": 0},
        ],
        "equipment": [
            {"id": "gen-1", "name": "Generator A", "type": "generator", "criticality": "high"},
        ],
    })
    assert res.status_code == 200
    return res.json()


def reading(value):
    return {
        "equipment_id": "gen-1",
        "type": "temperature",
        "value": value,
        "unit": "°C",
        "normal_range": {"min": 60, "max": 90},
    }


def test_health_echoes_request_id(client):
    res = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}
    assert res.headers["x-request-id"] == "req-123"


def test_readings_and_prediction(client):
    res = client.post("/maintenance/readings", json={"readings": [reading(120), reading(150)]})
    assert res.status_code == 200
    body = res.json()
    assert body[0]["status"] == "critical"
    assert body[0]["anomaly_score"] == pytest.approx(0.6667, abs=1e-4)
    assert body[1]["anomaly_score"] == 1.0

    res = client.get("/maintenance/predict/gen-1", params={"equipment_type": "generator", "equipment_name": "Generator A"})
    assert res.status_code == 200
    assert res.json()["equipment_name"] == "Generator A"
    assert res.json()["status"] == "warning"

    assert len(client.get("/maintenance/history/gen-1").json()) == 2
    assert client.delete("/maintenance/cache", params={"equipment_id": "gen-1"}).json()["success"] is True
    assert client.get("/maintenance/history/gen-1").json() == []


def test_invalid_reading_rejected(client):
    res = client.post("/maintenance/readings", json={"readings": [{"equipment_id": "gen-1"}]})
    assert res.status_code == 422


def test_report(client):
    res = client.post("/maintenance/report", json={
        "equipment": [{"id": "gen-1", "name": "Generator A", "type": "generator"}],
    })
    assert res.status_code == 200
    assert res.json()["overall_risk"] == "medium"


def test_schedule_and_lifecycle(client, roster):
    prediction = {
        "equipment_id": "gen-1",
        "equipment_name": "Generator A",
        "status": "critical",
        "predicted_failure_in_days": 2,
        "confidence": 0.8,
        "recommended_action": "IMMEDIATE MAINTENANCE REQUIRED: Critical temperature reading: 150°C. Predicted failure in 2 days.",
        "risk_level": "critical",
    }
    res = client.post("/maintenance/schedule", json={
        "predictions": [prediction],
        "inventory": [{"name": "Oil Filter", "quantity": 2}],
    })
    assert res.status_code == 200
    body = res.json()
    assert body["conflicts"] == []
    task = body["scheduled_tasks"][0]
    assert task["assigned_to"] == "Alice"
    assert task["status"] == "scheduled"
    assert task["required_parts"] == ["Oil Filter"]
    assert len(body["schedules"]) == 1

    res = client.post(f"/maintenance/tasks/{task['id']}/complete", json={"actual_duration": 200})
    assert res.status_code == 200
    assert res.json()["task"]["status"] == "completed"

    res = client.post(f"/maintenance/tasks/{task['id']}/complete")
    assert res.status_code == 409

    res = client.post(f"/maintenance/tasks/{task['id']}/reschedule", json={"new_date": "2030-01-01T09:00:00Z"})
    assert res.status_code == 409

    stats = client.get("/maintenance/analytics").json()
    assert stats["completed_tasks"] == 1
    assert stats["by_status"] == {"completed": 1}

    techs = client.get("/maintenance/technicians").json()
    assert techs[0]["current_workload"] == pytest.approx(56.25 - 200 / 480 * 100)


def test_unknown_task_is_404(client):
    assert client.get("/maintenance/tasks/MT-missing").status_code == 404
    assert client.post("/maintenance/tasks/MT-missing/start").status_code == 404


def test_task_listing_filters(client, roster):
    client.post("/maintenance/schedule", json={"predictions": [{
        "equipment_id": "gen-9",
        "equipment_name": "Generator Z",
        "status": "warning",
        "predicted_failure_in_days": 6,
        "confidence": 0.4,
        "recommended_action": "Schedule maintenance within 7 days. Predicted failure in 6 days.",
        "risk_level": "high",
    }]})
    assert len(client.get("/maintenance/tasks", params={"priority": "high"}).json()) == 1
    assert client.get("/maintenance/tasks", params={"status": "completed"}).json() == []


def test_negative_actual_duration_is_422(client, roster):
    prediction = {
        "equipment_id": "gen-1",
        "equipment_name": "Generator A",
        "status": "critical",
        "predicted_failure_in_days": 2,
        "confidence": 0.8,
        "recommended_action": "IMMEDIATE MAINTENANCE REQUIRED. Predicted failure in 2 days.",
        "risk_level": "critical",
    }
    task = client.post("/maintenance/schedule", json={"predictions": [prediction]}).json()["scheduled_tasks"][0]
    workload = client.get("/maintenance/technicians").json()[0]["current_workload"]

    res = client.post(f"/maintenance/tasks/{task['id']}/complete", json={"actual_duration": -960})
    assert res.status_code == 422
    assert client.get(f"/maintenance/tasks/{task['id']}").json()["status"] == "scheduled"
    assert client.get("/maintenance/technicians").json()[0]["current_workload"] == workload
