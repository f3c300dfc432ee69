"""Integration tests for /health, /healthz, /metrics and the root endpoint."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from backend.trips.main import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


class TestHealthEndpoint:
    def test_health_is_always_ok(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @patch("backend.trips.api.routes.health.check_db")
    @patch("backend.trips.api.routes.health.check_redis")
    def test_healthz_returns_200_when_all_ok(
        self,
        mock_check_redis: MagicMock,
        mock_check_db: MagicMock,
        client: TestClient,
    ) -> None:
        mock_check_db.return_value = (True, "ok")
        mock_check_redis.return_value = (True, "not_configured")

        response = client.get("/healthz")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["components"] == {"db": "ok", "redis": "not_configured"}

    @patch("backend.trips.api.routes.health.check_db")
    @patch("backend.trips.api.routes.health.check_redis")
    def test_healthz_returns_503_when_db_fails(
        self,
        mock_check_redis: MagicMock,
        mock_check_db: MagicMock,
        client: TestClient,
    ) -> None:
        mock_check_db.return_value = (False, "error: OperationalError")
        mock_check_redis.return_value = (True, "ok")

        response = client.get("/healthz")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["components"]["db"] == "error: OperationalError"

    @patch("backend.trips.api.routes.health.check_db")
    @patch("backend.trips.api.routes.health.check_redis")
    def test_healthz_returns_503_when_redis_fails(
        self,
        mock_check_redis: MagicMock,
        mock_check_db: MagicMock,
        client: TestClient,
    ) -> None:
        mock_check_db.return_value = (True, "ok")
        mock_check_redis.return_value = (False, "error: ConnectionError")

        response = client.get("/healthz")

        assert response.status_code == 503
        assert response.json()["components"]["redis"] == "error: ConnectionError"


class TestMetricsEndpoint:
    def test_metrics_returns_prometheus_format(self, client: TestClient) -> None:
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]

    def test_metrics_include_schedule_metrics(self, client: TestClient) -> None:
        from backend.trips.utils.metrics import PrometheusScheduleMetrics

        PrometheusScheduleMetrics().record_generation("cruise_port", 42.0, created=5, deleted=5)
        PrometheusScheduleMetrics().inc_cleanup_failure()

        text = client.get("/metrics").text

        assert 'schedule_generation_ms_bucket{kind="cruise_port"' in text
        assert 'schedule_children_created_total{kind="cruise_port"}' in text
        assert "component_cleanup_failures_total" in text


def test_root_returns_api_info(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Trip Components API", "version": "0.1.0"}
