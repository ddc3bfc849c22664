"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rizzchat.core.settings import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    LLMConfig,
    QuotaConfig,
    RedisConfig,
    ServerConfig,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.quota.daily_message_limit).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM Provider
    llm_provider: Literal["openai", "anthropic"] = Field(
        default="openai",
        description="LLM provider to use",
    )

    # OpenAI
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o",
        description="OpenAI model name",
    )

    # Anthropic
    anthropic_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Anthropic API key",
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Anthropic model name",
    )

    # Generation
    llm_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for chat replies",
    )
    llm_max_tokens: int = Field(
        default=1000,
        ge=1,
        description="Maximum tokens in a chat reply",
    )
    title_max_tokens: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Maximum tokens in a generated chat title",
    )
    llm_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Upper bound for a completion call; unset waits indefinitely",
    )

    # App
    app_name: str = Field(
        default="rizzchat",
        description="Application name",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Server port",
    )

    # JWT Auth
    jwt_secret_key: SecretStr = Field(
        description="Secret shared with the identity provider for token verification",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )
    jwt_access_token_expire_minutes: int = Field(
        default=60,
        ge=1,
        le=1440,
        description="Access token lifetime in minutes (used when minting dev tokens)",
    )

    # Database
    database_url: SecretStr = Field(
        description="Async database URL (mysql+aiomysql://...)",
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )

    # Quota / entitlement
    daily_message_limit: int = Field(
        default=10,
        ge=0,
        description="User messages per calendar day allowed on the free tier",
    )
    quota_timezone: str = Field(
        default="UTC",
        description="IANA timezone whose calendar day buckets the free-tier quota",
    )
    default_chat_title: str = Field(
        default="New Chat",
        min_length=1,
        max_length=255,
        description="Placeholder title for chats without a generated title",
    )
    redeem_rate_limit: str = Field(
        default="5/minute",
        description="Redeem endpoint rate limit per user",
    )

    @field_validator("quota_timezone")
    @classmethod
    def validate_quota_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown IANA timezone: {v!r}") from e
        return v

    # --- Domain properties ---

    @cached_property
    def llm(self) -> LLMConfig:
        """LLM provider configuration."""
        return LLMConfig(
            provider=self.llm_provider,
            openai_api_key=self.openai_api_key,
            openai_model=self.openai_model,
            anthropic_api_key=self.anthropic_api_key,
            anthropic_model=self.anthropic_model,
            temperature=self.llm_temperature,
            max_tokens=self.llm_max_tokens,
            title_max_tokens=self.title_max_tokens,
            timeout_seconds=self.llm_timeout_seconds,
        )

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            env=self.app_env,
            debug=self.debug,
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.host,
            port=self.port,
        )

    @cached_property
    def auth(self) -> AuthConfig:
        """JWT verification configuration."""
        return AuthConfig(
            secret_key=self.jwt_secret_key,
            algorithm=self.jwt_algorithm,
            access_token_expire_minutes=self.jwt_access_token_expire_minutes,
        )

    @cached_property
    def database(self) -> DatabaseConfig:
        """Database connection configuration."""
        return DatabaseConfig(url=self.database_url)

    @cached_property
    def redis(self) -> RedisConfig:
        """Redis connection configuration."""
        return RedisConfig(url=self.redis_url)

    @cached_property
    def quota(self) -> QuotaConfig:
        """Free-tier quota configuration."""
        return QuotaConfig(
            daily_message_limit=self.daily_message_limit,
            timezone=self.quota_timezone,
            default_chat_title=self.default_chat_title,
            redeem_rate_limit=self.redeem_rate_limit,
        )

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development


# Global settings instance
settings = Settings()
