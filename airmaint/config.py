# airmaint/config.py
from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "dev-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    app_name: str = "AirMaint API"

    # ---- Storage ----
    # Unset -> in-memory store. "sqlite" -> file under data_dir. Anything else is a SQLAlchemy URL.
    database_url: str | None = None
    data_dir: str = "./data"
    exit_on_db_failure: bool = True
    db_connect_retries: int = 3
    db_retry_base_delay: float = 0.5
    seed_memory_store: bool = True

    # ---- Uploads ----
    upload_dir: str = "./uploads"
    upload_max_bytes: int = 5 * 1024 * 1024
    upload_max_files: int = 5

    # ---- CORS ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Auth tokens ----
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_exp_minutes: int = 60 * 12

    # ---- Introspection ----
    enable_debug_routes: bool = False

    @property
    def is_production(self) -> bool:
        return (self.app_env or "local").strip().lower() in ("prod", "production")

    def resolved_database_url(self) -> str | None:
        url = (self.database_url or "").strip()
        if not url:
            return None
        if url == "sqlite":
            data_dir = Path(self.data_dir)
            data_dir.mkdir(parents=True, exist_ok=True)
            return f"sqlite:///{(data_dir / 'sqlite.db').as_posix()}"
        return url

    def model_post_init(self, __context) -> None:
        if not self.is_production:
            return

        if self.jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError("SECURITY: jwt_secret must be set in prod")

        origins = self.cors_allow_origins
        if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
            raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
