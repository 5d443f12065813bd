from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Database variables use the names the deployment already exports
      (DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD).
    - DB_URL, when set, wins over the individual parts.
    - Without either, a local SQLite file is used so the app starts in dev.
    """

    model_config = SettingsConfigDict(extra="ignore")

    db_url: str | None = None
    db_host: str | None = None
    db_port: int = 3306
    db_name: str | None = None
    db_user: str | None = None
    db_password: str | None = None
    db_connect_timeout_seconds: int = 10
    db_pool_size: int = 10
    log_level: str = "INFO"

    def resolved_db_url(self) -> str | URL:
        if self.db_url:
            return self.db_url

        if self.db_host:
            return URL.create(
                "mysql+pymysql",
                username=self.db_user,
                password=self.db_password,
                host=self.db_host,
                port=self.db_port,
                database=self.db_name,
            )

        repo_root = Path(__file__).resolve().parents[1]
        db_path = repo_root / "cpf_auth.db"
        return f"sqlite:///{db_path}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
