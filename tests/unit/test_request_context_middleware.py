"""Unit tests for request context middleware and route timings."""

from fastapi.testclient import TestClient

from storefront_sync.middleware.timing import (
    MAX_SAMPLES,
    RouteTimings,
    get_route_timings,
    reset_route_timings,
)


class TestRouteTimings:
    def test_empty(self) -> None:
        assert RouteTimings().to_dict() == {"count": 0, "mean_ms": 0.0, "max_ms": 0.0}

    def test_mean_and_max(self) -> None:
        timings = RouteTimings()
        for duration in (0.1, 0.2, 0.3):
            timings.record(duration)

        d = timings.to_dict()
        assert d["count"] == 3
        assert d["mean_ms"] == 200.0
        assert d["max_ms"] == 300.0

    def test_keeps_only_recent_samples(self) -> None:
        timings = RouteTimings()
        for _ in range(MAX_SAMPLES + 10):
            timings.record(0.01)
        assert timings.count == MAX_SAMPLES


def test_response_carries_request_id_and_timing(client: TestClient) -> None:
    reset_route_timings()

    response = client.get("/api/health/live", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert float(response.headers["X-Response-Time-Ms"]) >= 0
    assert get_route_timings()["/api/health/live"]["count"] == 1


def test_request_id_is_generated(client: TestClient) -> None:
    response = client.get("/api/health/live")
    assert len(response.headers["X-Request-ID"]) == 32
