"""Domain-specific configuration models."""

from rizzchat.core.settings.app_config import AppConfig
from rizzchat.core.settings.auth_config import AuthConfig
from rizzchat.core.settings.database_config import DatabaseConfig
from rizzchat.core.settings.llm_config import LLMConfig
from rizzchat.core.settings.quota_config import QuotaConfig
from rizzchat.core.settings.redis_config import RedisConfig
from rizzchat.core.settings.server_config import ServerConfig

__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "LLMConfig",
    "QuotaConfig",
    "RedisConfig",
    "ServerConfig",
]
