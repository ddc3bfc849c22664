"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from rizzchat.api.chat_router import router as chat_router
from rizzchat.api.common.auth_router import router as auth_router
from rizzchat.api.redeem_router import router as redeem_router
from rizzchat.core.config import settings
from rizzchat.core.database import Base, engine
from rizzchat.core.exceptions import (
    AppException,
    app_exception_handler,
    persistence_exception_handler,
    validation_exception_handler,
)
from rizzchat.core.middleware import AuthMiddleware
from rizzchat.core.rate_limit import limiter, rate_limit_exceeded_handler
from rizzchat.core.redis import close_redis, init_redis
from rizzchat.schemas.response_schema import ApiResponse, success_response

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.app.env,
        llm_provider=settings.llm.provider,
        daily_message_limit=settings.quota.daily_message_limit,
    )
    await init_redis()
    if settings.app.is_development:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    yield
    await close_redis()
    await engine.dispose()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app.name,
    description="AI dating and relationship coach chat with a daily free tier and redeemable pro codes",
    version=VERSION,
    lifespan=lifespan,
    debug=settings.app.debug,
)

app.state.limiter = limiter

# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(SQLAlchemyError, persistence_exception_handler)  # type: ignore[arg-type]

# Middleware (registration order: inner→outer, execution order: outer→inner)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(AuthMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.app.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=ApiResponse[dict])
async def health_check() -> dict:
    """Health check endpoint."""
    return success_response({"status": "healthy"})


@app.get("/", response_model=ApiResponse[dict])
async def root() -> dict:
    """Root endpoint."""
    return success_response(
        {
            "app": settings.app.name,
            "version": VERSION,
            "docs": "/docs",
        }
    )


# Register routers
app.include_router(auth_router)
app.include_router(chat_router)
app.include_router(redeem_router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "rizzchat.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.app.is_development,
    )
