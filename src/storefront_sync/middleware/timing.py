"""Request context and timing middleware."""

import time
import uuid
from collections import defaultdict
from dataclasses import dataclass, field

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

MAX_SAMPLES = 500
REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class RouteTimings:
    """Recent request durations for one path, in seconds."""

    durations: list[float] = field(default_factory=list)

    def record(self, duration: float) -> None:
        self.durations.append(duration)
        if len(self.durations) > MAX_SAMPLES:
            del self.durations[: len(self.durations) - MAX_SAMPLES]

    @property
    def count(self) -> int:
        return len(self.durations)

    @property
    def slowest(self) -> float:
        return max(self.durations, default=0.0)

    @property
    def mean(self) -> float:
        return sum(self.durations) / len(self.durations) if self.durations else 0.0

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "mean_ms": round(self.mean * 1000, 2),
            "max_ms": round(self.slowest * 1000, 2),
        }


_route_timings: dict[str, RouteTimings] = defaultdict(RouteTimings)


def get_route_timings() -> dict[str, dict]:
    return {path: timings.to_dict() for path, timings in _route_timings.items()}


def reset_route_timings() -> None:
    _route_timings.clear()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a request id into the structlog context and records request duration.

    A sync request can fan out into many Admin API calls; the request id ties
    their log lines back to the request that caused them.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            duration = time.perf_counter() - start
            _route_timings[request.url.path].record(duration)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time-Ms"] = str(round(duration * 1000, 2))

        logger.info(
            "request_completed",
            path=request.url.path,
            method=request.method,
            status=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )
        structlog.contextvars.clear_contextvars()
        return response
