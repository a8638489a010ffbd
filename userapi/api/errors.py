"""Exception handlers: map errors to status codes and {error, message} bodies."""

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from userapi.core.config import settings
from userapi.core.errors import AppError, InternalError, UnauthorizedError

logger = logging.getLogger(__name__)


def _validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors to {field, message}; ctx may hold non-JSON objects."""
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return details


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation Error",
            "message": "The request contains invalid fields",
            "details": _validation_details(exc),
        },
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        content = {
            "error": "Route not found",
            "message": f"The requested route {request.url.path} does not exist.",
        }
    else:
        content = {"error": str(exc.detail), "message": str(exc.detail)}
    return JSONResponse(
        status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    content: dict[str, Any] = InternalError().to_dict()
    if not settings.is_production:
        content["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
