"""FastAPI app factory.

Endpoints are thin wrappers over the Linear/GitHub services; every error leaves the
API as ``{"error": "<message>"}`` so consumers can render it inline.
"""

from __future__ import annotations

import logging

import requests
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from github import GithubException
from starlette.exceptions import HTTPException as StarletteHTTPException

from standup_dashboard import __version__
from standup_dashboard.linear.client import LinearApiError
from standup_dashboard.server.api_router import router as api_router
from standup_dashboard.server.config import ServerSettings

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=headers)


def create_app(settings: ServerSettings | None = None) -> FastAPI:
    settings = settings or ServerSettings()

    app = FastAPI(
        title="Standup Dashboard API",
        version=__version__,
        description="Internal API layer proxying Linear and GitHub for the standup dashboard.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Expose settings for request handlers that want to read it.
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = str(errors[0].get("msg")) if errors else "Invalid request"
        return _error(400, message)

    @app.exception_handler(LinearApiError)
    async def linear_error(_request: Request, exc: LinearApiError) -> JSONResponse:
        logger.warning("Linear request failed", extra={"error": str(exc)})
        return _error(500, str(exc))

    @app.exception_handler(GithubException)
    async def github_error(_request: Request, exc: GithubException) -> JSONResponse:
        logger.warning("GitHub request failed", extra={"status": exc.status})
        message = str(exc) or f"GitHub API error {exc.status}"
        return _error(500, message)

    @app.exception_handler(requests.RequestException)
    async def upstream_error(_request: Request, exc: requests.RequestException) -> JSONResponse:
        logger.warning("Upstream request failed", extra={"error": str(exc)})
        return _error(500, str(exc) or "Upstream request failed")

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled API error", extra={"path": request.url.path})
        return _error(500, str(exc) or "Internal server error")

    app.include_router(api_router, prefix="/api")
    return app
