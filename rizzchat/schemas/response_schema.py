"""Unified API response schemas."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

_ERROR_DESCRIPTIONS: dict[int, str] = {
    400: "Invalid input or redeem code",
    401: "Missing, expired, invalid or revoked token",
    403: "Role not permitted",
    404: "User or chat not found",
    409: "Redeem code already exists",
    429: "Daily message limit or rate limit reached",
    502: "Completion provider failed",
}


class ErrorResponse(BaseModel):
    """Error body: HTTP status, human-readable message and a stable code."""

    status: int
    message: str
    code: str


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope wrapping the endpoint payload in ``data``."""

    status: int = 200
    message: str = "Success"
    data: T | None = None


def success_response(data: T, status: int = 200, message: str = "Success") -> dict:
    """Build a success response dict for returning from endpoints."""
    return {"status": status, "message": message, "data": data}


def error_responses(*statuses: int) -> dict[int | str, dict[str, Any]]:
    """OpenAPI ``responses`` entries documenting the error envelope."""
    return {
        status: {"model": ErrorResponse, "description": _ERROR_DESCRIPTIONS[status]}
        for status in statuses
    }
