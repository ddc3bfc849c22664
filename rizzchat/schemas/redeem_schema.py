"""Redeem code request and response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_code(code: str) -> str:
    """Codes are matched case-insensitively, ignoring surrounding whitespace."""
    return code.strip().lower()


class RedeemRequest(BaseModel):
    """Body of POST /api/redeem."""

    code: str = Field(..., min_length=1, max_length=100)


class CreateRedeemCodeRequest(BaseModel):
    """Body of POST /api/admin/codes."""

    code: str = Field(..., min_length=1, max_length=50)

    @field_validator("code")
    @classmethod
    def normalize(cls, v: str) -> str:
        normalized = normalize_code(v)
        if not normalized:
            raise ValueError("Code must not be blank")
        return normalized


class RedeemCodeResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    code: str
    used: bool
    used_by_id: str | None = None
    created_at: datetime
    used_at: datetime | None = None
