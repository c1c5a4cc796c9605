"""
Application configuration using Pydantic Settings.

Upstream backends and the auth provider are switched through environment
variables (see the sections below).
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local"] = "local"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./llynx.db"

    # ===========================================
    # Local inference server (Ollama-compatible)
    # ===========================================
    OLLAMA_URL: str = "http://localhost:11434"

    # Model used when the client sends no selection
    DEFAULT_MODEL: str = "gemma3:1b"

    # Default system prompt. Literal "\n" sequences become real newlines.
    SYSTEM_PROMPT: str = "You are the llynx, a helpful assistant."

    # ===========================================
    # Remote completion API (via LiteLLM)
    # ===========================================
    REMOTE_API_KEY: str = ""

    # Custom endpoint (optional, for proxy servers)
    REMOTE_API_BASE: str = ""

    REMOTE_MODELS: List[str] = Field(default=["gpt-5"])

    # ===========================================
    # Upstream timeouts
    # ===========================================
    UPSTREAM_CONNECT_TIMEOUT_SECONDS: float = 10.0

    # Maximum wait for the next chunk of an upstream stream
    UPSTREAM_TIMEOUT_SECONDS: float = 300.0

    # ===========================================
    # Auth
    # ===========================================
    AUTH_PROVIDER: Literal["mock", "local"] = "mock"
    LOCAL_JWT_SECRET: str = ""
    LOCAL_JWT_ISSUER: str = "llynx-local"
    SESSION_COOKIE_NAME: str = "app_session"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"

    @property
    def default_system_prompt(self) -> str:
        """System prompt with escaped newlines expanded."""
        return self.SYSTEM_PROMPT.replace("\\n", "\n").strip()

    @property
    def has_remote_credential(self) -> bool:
        """Check if a remote completion API key is configured."""
        return bool(self.REMOTE_API_KEY.strip())


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
