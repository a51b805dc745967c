"""Route tests for /health and /metrics."""

from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from tutorly.core.constants import API_VERSION


def test_health_ok(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "tutorly-api"
    assert body["version"] == API_VERSION
    assert body["environment"] == "test"
    assert body["database"] == "ok"
    assert body["timestamp"].endswith("Z")


def test_health_reports_database_outage(client):
    with patch(
        "sqlalchemy.orm.Session.execute",
        side_effect=OperationalError("SELECT 1", {}, Exception("down")),
    ):
        response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "unavailable"


def test_metrics_exposition(client, auth_headers_teacher):
    client.post(
        "/api/v1/availability/weekly",
        json={"day_of_week": 1, "start_time": "09:00", "end_time": "10:00"},
        headers=auth_headers_teacher,
    )

    response = client.get("/metrics", params={"refresh": "1"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "no-cache" in response.headers["cache-control"]
    text = response.text
    assert "tutorly_service_operations_total" in text
    assert 'operation="add_weekly_slot"' in text
    assert "tutorly_prometheus_scrapes_total" in text


def test_unknown_route_is_problem_json(client):
    response = client.get("/api/v1/nothing-here")

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["status"] == 404
