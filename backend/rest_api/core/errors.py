"""
Exception handlers.

Every error leaves the API as {"success": false, "error": <message>} plus
any fields the exception carries (paymentStatus, details...).
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from shared.config.constants import ErrorMessages
from shared.config.logging import rest_api_logger as logger
from shared.security.rate_limit import rate_limit_exceeded_handler
from shared.utils.exceptions import AppException


def error_body(message: str, **extra) -> dict:
    return {"success": False, "error": message, **extra}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail, **exc.extra),
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or incomplete bodies are client errors (400), not 422."""
    errors = jsonable_encoder(exc.errors(), exclude={"input", "ctx", "url"})
    logger.warning("Request rejected", path=request.url.path, errors=len(errors))
    return JSONResponse(
        status_code=400,
        content=error_body(ErrorMessages.INVALID_REQUEST, details=errors),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
