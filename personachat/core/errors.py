"""
Error taxonomy shared by services and routers.

Services raise these; ``register_exception_handlers`` turns them into JSON
responses at the HTTP boundary. Anything that is not an ``AppError`` is an
unexpected failure: it is logged with its traceback and answered with a
generic 500 while the process keeps serving.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

__all__ = [
    "AppError",
    "NotFound",
    "Forbidden",
    "ValidationFailed",
    "NoPriorUserMessage",
    "Conflict",
    "AuthenticationFailed",
    "AccountBlocked",
    "CompletionFailed",
    "PersistenceFailed",
    "register_exception_handlers",
]


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "An unexpected error occurred"

    def __init__(self, detail: str = None, **extra):
        self.detail = detail or self.default_detail
        self.extra = extra
        super().__init__(self.detail)

    def to_body(self) -> dict:
        body = {"detail": self.detail}
        body.update(self.extra)
        return body


class NotFound(AppError):
    # Also used when the row exists but belongs to someone else
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not allowed"


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class NoPriorUserMessage(ValidationFailed):
    default_detail = "No user message precedes this message; nothing to regenerate from"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class AuthenticationFailed(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"


class AccountBlocked(Forbidden):
    default_detail = "Account blocked"


class CompletionFailed(AppError):
    default_detail = "Failed to generate a response"


class PersistenceFailed(AppError):
    default_detail = "Failed to save changes"


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on ``app``."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.detail}")
        else:
            logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.detail}")
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_body()), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        # The process keeps running; only the request fails
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": AppError.default_detail},
        )
