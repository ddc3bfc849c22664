"""Application exception classes and handlers."""

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger()


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


# --- Authentication (401) ---


class AuthenticationError(AppException):
    """Base authentication error."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message=message, code="AUTHENTICATION_ERROR", status_code=401)


class TokenExpiredError(AppException):
    """Token has expired; the client should send the user back through login."""

    def __init__(self) -> None:
        super().__init__(
            message="Token has expired",
            code="TOKEN_EXPIRED",
            status_code=401,
        )


class InvalidTokenError(AppException):
    def __init__(self) -> None:
        super().__init__(
            message="Invalid token",
            code="INVALID_TOKEN",
            status_code=401,
        )


# --- Authorization (403) ---


class AuthorizationError(AppException):
    """Insufficient permissions."""

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message=message, code="AUTHORIZATION_ERROR", status_code=403)


# --- Bad Request (400) ---


class InvalidInputError(AppException):
    """Missing or malformed request field."""

    def __init__(self, message: str = "Invalid input") -> None:
        super().__init__(message=message, code="INVALID_INPUT", status_code=400)


class InvalidCodeError(AppException):
    """Redeem code is unknown or has already been used."""

    def __init__(self) -> None:
        super().__init__(
            message="Invalid or already used code",
            code="INVALID_CODE",
            status_code=400,
        )


# --- Not Found (404) ---


class UserNotFoundError(AppException):
    def __init__(self) -> None:
        super().__init__(
            message="User not found",
            code="USER_NOT_FOUND",
            status_code=404,
        )


class ChatNotFoundError(AppException):
    """Chat does not exist or belongs to another user."""

    def __init__(self) -> None:
        super().__init__(
            message="Chat not found",
            code="CHAT_NOT_FOUND",
            status_code=404,
        )


# --- Conflict (409) ---


class RedeemCodeAlreadyExistsError(AppException):
    def __init__(self) -> None:
        super().__init__(
            message="Redeem code already exists",
            code="REDEEM_CODE_EXISTS",
            status_code=409,
        )


# --- Quota (429) ---


class QuotaExceededError(AppException):
    """Free-tier daily message cap reached."""

    def __init__(self) -> None:
        super().__init__(
            message="Daily message limit reached. Upgrade to Pro for unlimited messages.",
            code="QUOTA_EXCEEDED",
            status_code=429,
        )


# --- Upstream / storage (5xx) ---


class GenerationFailedError(AppException):
    """Completion provider failed or returned nothing."""

    def __init__(
        self, message: str = "Failed to generate chat response. Please try again later."
    ) -> None:
        super().__init__(message=message, code="GENERATION_FAILED", status_code=502)


class PersistenceError(AppException):
    def __init__(self, message: str = "A storage error occurred") -> None:
        super().__init__(message=message, code="PERSISTENCE_FAILURE", status_code=500)


# --- Exception Handlers ---


def _error_body(status: int, message: str, code: str) -> dict:
    return {"status": status, "message": message, "code": code}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, exc.message, exc.code),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request validation failures as INVALID_INPUT."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid input"
    return JSONResponse(
        status_code=400,
        content=_error_body(400, message, "INVALID_INPUT"),
    )


async def persistence_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Translate unhandled storage errors into PERSISTENCE_FAILURE."""
    logger.exception("Storage error", path=request.url.path)
    error = PersistenceError()
    return JSONResponse(
        status_code=error.status_code,
        content=_error_body(error.status_code, error.message, error.code),
    )
