# app/core/config.py
"""
Environment-driven settings.

Values are read at call time (not import time) so that `.env` loading in
app.main and test overrides via os.environ both take effect.
"""
from __future__ import annotations

import logging
import os
from datetime import datetime, tzinfo, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

try:
    from tzlocal import get_localzone  # optional dependency
except Exception:
    get_localzone = None  # type: ignore

log = logging.getLogger("app.config")

DEFAULT_SMTP_SECRET = "licensure-mail-salt"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("%s=%r is not an integer; using %s", name, raw, default)
        return default


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# ---------------------------
# Database / startup
# ---------------------------
def database_url() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///./licensure.db")


def create_all_enabled() -> bool:
    return _env_flag("ENABLE_CREATE_ALL", "1")


def migrations_enabled() -> bool:
    return _env_flag("RUN_MIGRATIONS", "0")


def scheduler_enabled() -> bool:
    return _env_flag("ENABLE_SCHEDULER", "1")


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


# ---------------------------
# Time
# ---------------------------
def timezone_name() -> str:
    """APP_TIMEZONE, else the system zone via tzlocal, else UTC."""
    name = os.getenv("APP_TIMEZONE")
    if name:
        return name
    if get_localzone:
        try:
            return str(get_localzone())
        except Exception:
            return "UTC"
    return "UTC"


def app_timezone() -> tzinfo:
    try:
        return ZoneInfo(timezone_name())
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def now_local() -> datetime:
    """Reference clock: aware datetime in the app timezone."""
    return datetime.now(app_timezone())


def scheduler_time() -> tuple[int, int]:
    return _env_int("APP_SCHEDULER_HOUR", 9), _env_int("APP_SCHEDULER_MINUTE", 0)


# ---------------------------
# Mail
# ---------------------------
def smtp_host() -> str:
    return os.getenv("SMTP_HOST", "smtp.gmail.com")


def smtp_port() -> int:
    return _env_int("SMTP_PORT", 465)


def mail_from_name() -> str:
    return os.getenv("MAIL_FROM_NAME", "License Bot")


def mail_send_timeout() -> int:
    return _env_int("MAIL_SEND_TIMEOUT", 15)


def env_mail_credentials() -> tuple[str, str]:
    return os.getenv("MAIL_USER", ""), os.getenv("MAIL_PASS", "")


def smtp_secret_configured() -> bool:
    return bool(os.getenv("SMTP_SECRET_KEY") or os.getenv("APP_SECRET"))


def smtp_secret() -> str:
    """
    Key material for encrypting the stored SMTP password.
    Without SMTP_SECRET_KEY / APP_SECRET a built-in value is used, which only
    obscures the password: anyone with the source can decrypt it.
    """
    return os.getenv("SMTP_SECRET_KEY") or os.getenv("APP_SECRET") or DEFAULT_SMTP_SECRET
