"""JWT verification configuration."""

from pydantic import BaseModel, SecretStr


class AuthConfig(BaseModel, frozen=True):
    """Settings shared with the identity provider that signs bearer tokens."""

    secret_key: SecretStr
    algorithm: str
    access_token_expire_minutes: int
