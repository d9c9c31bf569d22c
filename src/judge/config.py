"""Configuration settings for the Contest Judge."""

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class LanguageRuntime(BaseModel):
    """Interpreter invocation for one submission language."""

    command: list[str]
    suffix: str


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="JUDGE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Application
    app_name: str = "Contest Judge"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Database
    # Default to Postgres; tests may override via JUDGE_DB_URL
    db_url: str = "postgresql+asyncpg://localhost/contest_judge"
    db_pool_size: int = 10
    db_max_overflow: int = 20

    # Auth
    jwt_issuer: str = "contest-judge"
    jwt_audience: str = "contest-judge"
    jwt_algorithm: str = "HS256"
    jwt_public_key: Optional[str] = None

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Rate Limiting
    rate_limit_requests: int = 60
    rate_limit_window: int = 60  # seconds

    # Judging
    runtimes: dict[str, LanguageRuntime] = {
        "javascript": LanguageRuntime(command=["node"], suffix=".js"),
        "python": LanguageRuntime(command=["python3"], suffix=".py"),
    }
    work_dir: Optional[str] = None  # None uses the system temp dir
    stderr_limit: int = 64 * 1024  # bytes kept for diagnostics
    sandbox_new_session: bool = True
    sandbox_wrapper: list[str] = []  # e.g. ["prlimit", "--as=268435456", "--"]
    sandbox_env_passthrough: list[str] = ["PATH", "LANG", "HOME"]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
