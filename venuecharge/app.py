"""
FastAPI application entry point for the site backend.
"""

from __future__ import annotations

import json
import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from venuecharge.config import get_settings
from venuecharge.errors import SERVER_ERROR_MESSAGE, ApiError
from venuecharge.routes import router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO)
    )

    app = FastAPI(title="Venue Charging Site Backend", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        path = request.url.path
        if path.startswith(settings.api_prefix):
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s %d in %.0fms",
                request.method,
                path,
                response.status_code,
                duration_ms,
            )
        return response

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        return exc.to_response()

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = json.loads(json.dumps(exc.errors(), default=str))
        return ApiError(400, "Invalid request", errors=errors).to_response()

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return ApiError(500, SERVER_ERROR_MESSAGE).to_response()

    return app


app = create_app()
