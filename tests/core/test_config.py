from __future__ import annotations

import pytest

from courseware.core.config import AppEnv, Settings, load_settings

# ---- valid values ----


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "APP_ENV",
        "LOG_LEVEL",
        "LOG_JSON",
        "VIDEOS_BUCKET",
        "THUMBNAILS_BUCKET",
        "STORAGE_URL",
        "STORAGE_SERVICE_KEY",
        "CORS_ORIGINS",
        "ADMIN_BOOTSTRAP_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.videos_bucket == "videos"
    assert settings.thumbnails_bucket == "course-thumbnails"
    assert settings.storage_configured is False
    assert settings.cors_origins == ("http://localhost:5173",)
    assert settings.admin_bootstrap_token is None


def test_load_settings_normalizes_case_and_whitespace(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "  TEST ")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.log_level == "debug"


def test_ephemeral_secret_outside_prod(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.delenv("AUTH_JWT_SECRET", raising=False)
    first, second = load_settings(), load_settings()
    assert len(first.auth_jwt_secret) >= 32
    assert first.auth_jwt_secret != second.auth_jwt_secret


def test_prod_requires_jwt_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("AUTH_JWT_SECRET", raising=False)
    with pytest.raises(ValueError, match="AUTH_JWT_SECRET is required"):
        load_settings()


def test_prod_with_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("AUTH_JWT_SECRET", "s3cret")
    assert load_settings().auth_jwt_secret == "s3cret"


def test_storage_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORAGE_URL", "https://abc.storage.example/")
    monkeypatch.setenv("STORAGE_SERVICE_KEY", "key")
    monkeypatch.setenv("VIDEOS_BUCKET", "lesson-videos")
    settings = load_settings()
    assert settings.storage_url == "https://abc.storage.example"
    assert settings.storage_configured is True
    assert settings.videos_bucket == "lesson-videos"


def test_cors_origins_are_split(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    assert load_settings().cors_origins == ("https://a.example", "https://b.example")


@pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("no", False)])
def test_log_json_flag(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("LOG_JSON", raw)
    assert load_settings().log_json is expected


# ---- invalid values ----


def test_load_settings_rejects_invalid_app_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


def test_load_settings_rejects_invalid_log_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


def test_load_settings_rejects_bad_port(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValueError, match="PORT must be an integer"):
        load_settings()


def test_load_settings_rejects_blank_bucket(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("THUMBNAILS_BUCKET", "   ")
    with pytest.raises(ValueError, match="must be non-empty"):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev", **overrides) -> Settings:
    values = dict(
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        database_url=None,
        redis_url=None,
        storage_url=None,
        storage_service_key=None,
        auth_jwt_secret="x",
    )
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


@pytest.mark.parametrize("env", ["dev", "test", "prod"])
def test_settings_env_flags(env: AppEnv) -> None:
    s = _make_settings(env)
    assert (s.is_dev, s.is_test, s.is_prod) == (env == "dev", env == "test", env == "prod")


def test_storage_needs_url_and_key() -> None:
    assert not _make_settings(storage_url="https://x").storage_configured
    assert not _make_settings(storage_service_key="k").storage_configured
    assert _make_settings(storage_url="https://x", storage_service_key="k").storage_configured


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]


def test_admin_bootstrap_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ADMIN_BOOTSTRAP_TOKEN", "  setup-token ")
    assert load_settings().admin_bootstrap_token == "setup-token"
    monkeypatch.setenv("ADMIN_BOOTSTRAP_TOKEN", "")
    assert load_settings().admin_bootstrap_token is None
