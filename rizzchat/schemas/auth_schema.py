"""Authentication and user schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TokenPayload(BaseModel):
    """Decoded JWT payload issued by the identity provider."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    sub: str
    role: str = "user"
    type: str
    jti: str
    exp: int
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None


class UserResponse(BaseModel):
    """Public user representation."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    is_pro: bool
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    """Simple message response."""

    model_config = ConfigDict(frozen=True)

    message: str
