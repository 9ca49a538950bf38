"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.
"""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # ── MySQL / TiDB ───────────────────────────────────────────────────────
    db_host: str = "mysql"
    db_port: int = 3306
    db_user: str = "root"
    db_password: str = ""
    db_name: str = "chopbox"
    # Full SQLAlchemy URL; takes precedence over the db_* fields when set
    # (e.g. sqlite+aiosqlite:///./chopbox.db for local runs and tests).
    database_url: Optional[str] = None

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # ── Redis ──────────────────────────────────────────────────────────────
    redis_host: str = "redis"
    redis_port: int = 6379
    expand_cache_ttl: int = 86400        # 24h TTL for expanded short links

    # ── bit.ly URL expansion ───────────────────────────────────────────────
    bitly_login: str = ""
    bitly_api_key: str = ""
    bitly_format: str = "txt"
    bitly_api_version: str = "v3"
    bitly_api_url: str = "http://api.bit.ly/expand"
    bitly_timeout: float = 5.0

    # ── Feed / profiles ────────────────────────────────────────────────────
    leaderboard_size: int = 10
    gravatar_base_url: str = "http://www.gravatar.com/avatar/"
    gravatar_query: str = "d=mm&s=120"

    # ── Observability ──────────────────────────────────────────────────────
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    tracing_enabled: bool = True
    service_name: str = "chopbox-api"
    environment: str = "development"
    log_level: str = "INFO"


settings = Settings()
