"""
Error taxonomy for the marketplace API and the handlers that render it.

Every error leaves the service as ``{"message": ...}`` with a fixed status
code. Validation errors additionally carry ``errors`` with field details.
"""

from typing import Any, List, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)


class TravelMarketError(Exception):
    """Base class for errors that map onto an HTTP response"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)

    def to_content(self) -> dict:
        return {"message": self.message}


class Unauthorized(TravelMarketError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class InvalidCredentials(Unauthorized):
    message = "Invalid username or password"


class NotFound(TravelMarketError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class ValidationFailed(TravelMarketError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request data"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_content(self) -> dict:
        return {"message": self.message, "errors": self.errors}


class ConstraintViolation(TravelMarketError):
    """A unique or foreign-key constraint rejected a write"""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid data"


class DuplicateUser(ConstraintViolation):
    message = "Username already exists"


def _path_only(errors: List[dict]) -> bool:
    return bool(errors) and all(err.get("loc", ("",))[0] == "path" for err in errors)


async def travelmarket_error_handler(request: Request, exc: TravelMarketError):
    logger.info(
        "request_rejected",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        reason=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    message = "Invalid path parameter" if _path_only(errors) else "Invalid request data"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": message, "errors": errors},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("rate_limit_exceeded", limit=str(exc.detail))
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"message": f"Too many requests: {exc.detail}"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TravelMarketError, travelmarket_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
