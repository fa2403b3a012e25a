from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str | None
    openai_api_key: str | None
    ai_provider: str
    ai_model: str
    ai_temperature: float
    db_path: str
    duplicate_prefix_chars: int
    session_ttl_hours: int
    display_timezone: str
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    max_upload_bytes: int


settings = Settings(
    # API_KEY is the name the hosted frontend deployment used for the same key.
    gemini_api_key=_get_env("GEMINI_API_KEY") or _get_env("API_KEY"),
    openai_api_key=_get_env("OPENAI_API_KEY"),
    ai_provider=(_get_env("AI_PROVIDER", "gemini") or "gemini").strip().lower(),
    ai_model=(_get_env("AI_MODEL", "gemini-3-flash-preview") or "gemini-3-flash-preview").strip(),
    ai_temperature=_get_env_float("AI_TEMPERATURE", 0.7),
    db_path=_get_env("DB_PATH", "data/propgen.db") or "data/propgen.db",
    duplicate_prefix_chars=_get_env_int("DUPLICATE_PREFIX_CHARS", 100),
    session_ttl_hours=_get_env_int("SESSION_TTL_HOURS", 168),
    display_timezone=_get_env("DISPLAY_TIMEZONE", "UTC") or "UTC",
    rate_limit=_get_env("RATE_LIMIT", "20/minute") or "20/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX", r"^https:\/\/[a-z0-9-]+-.*\.vercel\.app$"),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
    max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 2 * 1024 * 1024),
)

if settings.ai_provider not in {"gemini", "openai"}:
    raise RuntimeError("AI_PROVIDER must be either 'gemini' or 'openai'.")

if settings.duplicate_prefix_chars < 1:
    raise RuntimeError("DUPLICATE_PREFIX_CHARS must be a positive integer.")
