"""Error responses for the HTTP API.

Every error body has the shape ``{"error": "<message>"}``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront_sync.errors import FeedUnavailable, InvalidDomain


class ApiError(Exception):
    """Raised by endpoints to return ``{"error": message}`` with a status code."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_error_handlers(app: FastAPI) -> None:
    """Map API and domain errors to JSON error responses."""

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(InvalidDomain)
    async def handle_invalid_domain(request: Request, exc: InvalidDomain) -> JSONResponse:
        return error_response(400, str(exc))

    @app.exception_handler(FeedUnavailable)
    async def handle_feed_unavailable(request: Request, exc: FeedUnavailable) -> JSONResponse:
        return error_response(502, str(exc))
