"""JWT access token helpers and Redis-backed revocation list."""

import uuid
from datetime import UTC, datetime, timedelta

import jwt
import redis.asyncio as redis

from rizzchat.core.config import settings
from rizzchat.core.exceptions import InvalidTokenError, TokenExpiredError
from rizzchat.schemas.auth_schema import TokenPayload

BLACKLIST_PREFIX = "token_blacklist:"

# Claims every access token must carry; decoding rejects tokens missing any.
REQUIRED_CLAIMS: tuple[str, ...] = ("exp", "sub", "jti")

# Identity claims copied onto the user record on sync.
PROFILE_CLAIMS: tuple[str, ...] = (
    "email",
    "first_name",
    "last_name",
    "profile_image_url",
)


class TokenService:
    """Mint, decode and revoke access tokens.

    Tokens are normally issued by the external identity provider; minting
    here exists for local development and tests.
    """

    def __init__(self, redis_client: redis.Redis) -> None:  # type: ignore[type-arg]
        self._redis = redis_client
        self._secret = settings.auth.secret_key.get_secret_value()
        self._algorithm = settings.auth.algorithm

    def create_access_token(
        self,
        user_id: str,
        role: str = "user",
        expires_in: timedelta | None = None,
        **profile: str | None,
    ) -> str:
        """Create a signed JWT access token carrying identity claims."""
        now = datetime.now(UTC)
        lifetime = expires_in or timedelta(
            minutes=settings.auth.access_token_expire_minutes
        )
        payload: dict = {
            "sub": user_id,
            "role": role,
            "type": "access",
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + lifetime,
        }
        for claim in PROFILE_CLAIMS:
            if profile.get(claim) is not None:
                payload[claim] = profile[claim]
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate a JWT token."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError from e

        return TokenPayload.model_validate(payload)

    # --- Revocation ---

    async def blacklist_token(self, jti: str, exp: int) -> None:
        """Revoke a token until its natural expiry."""
        ttl = exp - int(datetime.now(UTC).timestamp())
        if ttl > 0:
            await self._redis.setex(f"{BLACKLIST_PREFIX}{jti}", ttl, "1")

    async def is_blacklisted(self, jti: str) -> bool:
        result = await self._redis.get(f"{BLACKLIST_PREFIX}{jti}")
        return result is not None
