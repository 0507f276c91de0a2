"""Exception handlers: every failure leaves the API as ``{"message", "error"?}``."""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from scrapbook.config import settings
from scrapbook.errors import AppError

logger = logging.getLogger(__name__)


def error_body(message: str, error: Any = None) -> dict:
    body: dict[str, Any] = {"message": message}
    if error is not None and not settings.is_production:
        body["error"] = jsonable_encoder(error)
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        rid = getattr(request.state, "request_id", "")
        if exc.status_code >= 500:
            logger.error("[%s] %s %s failed: %s", rid, request.method, request.url, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.detail),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_body("Invalid request", exc.errors()),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = getattr(request.state, "request_id", "")
        logger.exception("[%s] Unhandled error on %s %s", rid, request.method, request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=error_body("Server Error", str(exc)),
            headers={"X-Request-ID": rid} if rid else None,
        )
