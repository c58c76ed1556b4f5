from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it's easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _getbool(name: str, default: str = "false") -> bool:
    return _getenv(name, default).lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    storage_url: str | None
    storage_service_key: str | None
    auth_jwt_secret: str
    videos_bucket: str = "videos"
    thumbnails_bucket: str = "course-thumbnails"
    cors_origins: tuple[str, ...] = ("http://localhost:5173",)
    admin_bootstrap_token: str | None = None

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def storage_configured(self) -> bool:
        return bool(self.storage_url and self.storage_service_key)


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    # Tokens are issued by the hosted auth provider and verified with its
    # shared secret.  Outside prod an ephemeral secret keeps the app bootable;
    # tests mint tokens against it.
    auth_jwt_secret = _getenv("AUTH_JWT_SECRET", "")
    if not auth_jwt_secret:
        if app_env_raw == "prod":
            raise ValueError("AUTH_JWT_SECRET is required when APP_ENV=prod")
        auth_jwt_secret = secrets.token_urlsafe(32)

    videos_bucket = _getenv("VIDEOS_BUCKET", "videos")
    thumbnails_bucket = _getenv("THUMBNAILS_BUCKET", "course-thumbnails")
    if not videos_bucket or not thumbnails_bucket:
        raise ValueError("VIDEOS_BUCKET and THUMBNAILS_BUCKET must be non-empty")

    cors_origins = tuple(
        o.strip()
        for o in _getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if o.strip()
    )

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getbool("LOG_JSON"),
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        redis_url=_getenv("REDIS_URL", "") or None,
        storage_url=_getenv("STORAGE_URL", "").rstrip("/") or None,
        storage_service_key=_getenv("STORAGE_SERVICE_KEY", "") or None,
        auth_jwt_secret=auth_jwt_secret,
        videos_bucket=videos_bucket,
        thumbnails_bucket=thumbnails_bucket,
        cors_origins=cors_origins,
        admin_bootstrap_token=_getenv("ADMIN_BOOTSTRAP_TOKEN", "") or None,
    )


SETTINGS = load_settings()
