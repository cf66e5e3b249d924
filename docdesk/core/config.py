"""
Runtime configuration.

``Settings`` reads environment variables (and ``.env``); the admin panel's
own JSON blob, pointed to by ``SETTINGS_FILE``, can additionally carry the
remote database credentials, theme and mail settings.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docdesk.schemas.gateway import DatabaseConfig

logger = logging.getLogger(__name__)

DEV_SECRET_KEY = "docdesk-dev-secret-do-not-deploy"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # ── Service ──────────────────────────────────────────────────────
    PROJECT_NAME: str = "DocDesk"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"
    PROXY_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    # ── Tokens and cookies ───────────────────────────────────────────
    SECRET_KEY: str = DEV_SECRET_KEY
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    COOKIE_SECURE: bool = False

    # ── Bootstrap account, created when the user table is empty ──────
    FIRST_ADMIN_EMAIL: str = "admin@omservices.com"
    FIRST_ADMIN_PASSWORD: str = "password123"
    FIRST_ADMIN_NAME: str = "Main Admin"

    # ── Remote store (generic SQL query proxy) ──────────────────────
    REMOTE_DB_ENABLED: bool = False
    QUERY_PROXY_URL: str = "http://localhost:8000/api"
    QUERY_TIMEOUT_SECONDS: float = 30.0
    DB_HOST: str = ""
    DB_PORT: int = 3306
    DB_NAME: str = ""
    DB_USER: str = ""
    DB_PASSWORD: str = ""
    DB_SSL: str = "preferred"
    # SQLAlchemy driver used by the proxy endpoints
    DB_DRIVER: str = "mysql+aiomysql"
    # Proxy engines kept open at once, one per distinct connection config
    DB_ENGINE_CACHE_SIZE: int = 8
    SETTINGS_FILE: str | None = None

    # ── Business rules ───────────────────────────────────────────────
    TIMEZONE_OFFSET: str = "+05:30"
    WORK_START: str = "09:00"
    LATE_THRESHOLD_MINUTES: int = 15
    WORKING_HOURS_PER_DAY: float = 8.0
    HALF_DAY_THRESHOLD_HOURS: float = 4.0
    DEFAULT_BREAK_MINUTES: int = 60
    PAY_DAY: int = 5

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, v: object) -> object:
        # Comma-separated string from the environment
        if isinstance(v, str) and not v.lstrip().startswith("["):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


# ── Persisted admin-panel settings ──────────────────────────────────
class MySQLSection(BaseModel):
    enabled: bool = False
    config: DatabaseConfig | None = None


class PersistedSettings(BaseModel):
    mysql: MySQLSection = MySQLSection()
    theme: str = "light"
    gmail: dict = {}

    model_config = {"extra": "ignore"}


def load_persisted_settings(path: str | Path | None) -> PersistedSettings:
    """Read the persisted settings blob; a missing or broken file yields defaults."""
    if not path:
        return PersistedSettings()
    file = Path(path)
    if not file.is_file():
        logger.warning("Settings file %s not found, using defaults", file)
        return PersistedSettings()
    try:
        return PersistedSettings.model_validate(json.loads(file.read_text("utf-8")))
    except ValueError as e:
        logger.warning("Could not parse settings file %s: %s", file, e)
        return PersistedSettings()


def resolve_database_config(
    conf: Settings, persisted: PersistedSettings
) -> DatabaseConfig | None:
    """Pick the remote database credentials, persisted blob first."""
    if persisted.mysql.enabled and persisted.mysql.config is not None:
        return persisted.mysql.config
    if conf.REMOTE_DB_ENABLED and conf.DB_HOST:
        return DatabaseConfig(
            host=conf.DB_HOST,
            port=conf.DB_PORT,
            database=conf.DB_NAME,
            username=conf.DB_USER,
            password=conf.DB_PASSWORD,
            ssl=conf.DB_SSL,
        )
    return None


settings = Settings()

if settings.SECRET_KEY == DEV_SECRET_KEY:
    logger.warning("SECRET_KEY is the development default; set it in the environment before deploying")
