"""ASGI authentication middleware."""

import json
from typing import Any

import jwt
import structlog
from starlette.types import ASGIApp, Receive, Scope, Send

from rizzchat.core import redis as redis_state
from rizzchat.core.config import settings
from rizzchat.services.token_service import (
    BLACKLIST_PREFIX,
    PROFILE_CLAIMS,
    REQUIRED_CLAIMS,
)

logger = structlog.get_logger()

PUBLIC_PATHS: set[str] = {
    "",
    "/",
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}


class AuthMiddleware:
    """Pure ASGI middleware validating bearer tokens from the identity provider.

    On success the verified claims are placed on ``request.state``; an
    expired token yields ``TOKEN_EXPIRED`` so the client can send the user
    back through login.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "")
        if method == "OPTIONS":
            await self.app(scope, receive, send)
            return

        path = scope["path"]
        normalized = path.rstrip("/") or "/"
        if normalized in PUBLIC_PATHS or path.startswith(("/docs", "/redoc")):
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        auth_header = headers.get(b"authorization", b"").decode()

        if not auth_header.startswith("Bearer "):
            await self._send_error(
                send, 401, "MISSING_TOKEN", "Authorization header required"
            )
            return

        token = auth_header[7:]
        secret = settings.auth.secret_key.get_secret_value()
        algorithm = settings.auth.algorithm

        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                secret,
                algorithms=[algorithm],
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError:
            await self._send_error(send, 401, "TOKEN_EXPIRED", "Token has expired")
            return
        except jwt.InvalidTokenError:
            await self._send_error(send, 401, "INVALID_TOKEN", "Invalid token")
            return

        if payload.get("type") != "access" or not payload.get("sub"):
            logger.warning("Rejected non-access token", path=path)
            await self._send_error(send, 401, "INVALID_TOKEN", "Invalid token type")
            return

        jti = payload["jti"]
        client = redis_state.redis_client
        if client is not None and jti:
            is_revoked = await client.get(f"{BLACKLIST_PREFIX}{jti}")
            if is_revoked is not None:
                logger.info("Rejected revoked token", sub=payload["sub"], path=path)
                await self._send_error(
                    send, 401, "TOKEN_BLACKLISTED", "Token has been revoked"
                )
                return

        scope.setdefault("state", {})
        scope["state"]["user_id"] = str(payload["sub"])
        scope["state"]["role"] = payload.get("role", "user")
        scope["state"]["jti"] = jti
        scope["state"]["exp"] = payload["exp"]
        scope["state"]["profile"] = {
            claim: payload.get(claim) for claim in PROFILE_CLAIMS
        }

        await self.app(scope, receive, send)

    @staticmethod
    async def _send_error(send: Send, status: int, code: str, message: str) -> None:
        """Send a JSON error response directly."""
        body = json.dumps({"status": status, "message": message, "code": code}).encode()

        await send(
            {
                "type": "http.response.start",
                "status": status,
                "headers": [
                    [b"content-type", b"application/json"],
                    [b"content-length", str(len(body)).encode()],
                ],
            }
        )
        await send({"type": "http.response.body", "body": body})
