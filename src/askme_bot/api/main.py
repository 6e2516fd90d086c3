"""FastAPI health endpoint served next to the Socket Mode connection."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

HEALTH_BODY = "askme ok"
HEALTH_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_health_app() -> FastAPI:
    app = FastAPI(title="askme health", docs_url=None, redoc_url=None, openapi_url=None)

    @app.api_route("/", methods=HEALTH_METHODS, response_class=PlainTextResponse)
    def health() -> str:
        return HEALTH_BODY

    @app.exception_handler(StarletteHTTPException)
    async def plain_text_errors(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
        body = "not found" if exc.status_code == 404 else str(exc.detail)
        return PlainTextResponse(body, status_code=exc.status_code)

    return app

