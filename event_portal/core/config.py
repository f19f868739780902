from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # -------------------------
    # App
    # -------------------------
    app_name: str = "Event Portal"
    api_prefix: str = "/api"
    cors_allow_origins: str = "*"

    # -------------------------
    # Storage
    # memory   -> in-process dict (local dev / demo)
    # supabase -> Postgres via Supabase
    # -------------------------
    storage_backend: Literal["memory", "supabase"] = "memory"
    seed_demo_data: bool = False

    supabase_url: str | None = None
    supabase_service_key: str | None = None

    # -------------------------
    # Logging
    # -------------------------
    log_level: str = "INFO"
    log_json: bool = True

    # -------------------------
    # Pydantic v2 config
    # -------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
