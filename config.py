"""
Centralised settings loader.

Values come from the process environment (or a local `.env`) and are read
once at startup; nothing here is reloaded while the process runs.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class Settings(BaseSettings):
    # ─── runtime / server ────────────────────────────────────────────
    env_name: str = Field("local", alias="ENV_NAME")
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(4000, ge=1, le=65535, alias="PORT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    # ─── store ───────────────────────────────────────────────────────
    database_url: str = Field(
        "postgresql+asyncpg://postgres@localhost:5432/genutra",
        alias="DATABASE_URL",
    )
    create_tables: bool = Field(False, alias="CREATE_TABLES")

    # ─── auth ────────────────────────────────────────────────────────
    jwt_secret: str = Field("genutra-secret", alias="JWT_SECRET")
    token_ttl_days: int = Field(7, ge=1, alias="TOKEN_TTL_DAYS")
    bcrypt_rounds: int = Field(10, ge=4, le=31, alias="BCRYPT_ROUNDS")

    # ─── Gemini ──────────────────────────────────────────────────────
    gemini_api_key: str | None = Field(None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("models/gemini-2.0-flash", alias="GEMINI_MODEL")

    # allow other teammates’ env-vars without crashing
    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> Settings:  # pragma: no cover
    return Settings()  # type: ignore[call-arg]


settings: Settings = _cached()
