# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every field has a local default.
- Components receive settings by injection, get_settings() is only used by the composition root.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKBOARD"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    from dotenv import load_dotenv

    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    console_enabled: bool

    # ---- Local data (ignored by git) ----
    data_dir: Path
    store_db_path: Path
    key_prefix: str

    # ---- Simulated round-trip latency ----
    login_delay_ms: int
    write_delay_ms: int

    # ---- Seeded admin ----
    admin_email: str
    admin_password: str
    admin_name: str

    # ---- Cross-process change detection ----
    watch_interval_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard") or "taskboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))
        store_db_path = _env_path(_k("STORE_DB_PATH"), data_dir / "store.sqlite3")
        key_prefix = _env(_k("KEY_PREFIX"), "task_tracker").strip() or "task_tracker"

        login_delay_ms = max(0, _env_int(_k("LOGIN_DELAY_MS"), 500))
        write_delay_ms = max(0, _env_int(_k("WRITE_DELAY_MS"), 300))

        admin_email = _env(_k("ADMIN_EMAIL"), "admin@admin.com").strip()
        admin_password = _env(_k("ADMIN_PASSWORD"), "admin")
        admin_name = _env(_k("ADMIN_NAME"), "System Admin")

        watch_interval_seconds = _env_float(_k("WATCH_INTERVAL_SECONDS"), 1.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            store_db_path=store_db_path,
            key_prefix=key_prefix,
            login_delay_ms=login_delay_ms,
            write_delay_ms=write_delay_ms,
            admin_email=admin_email,
            admin_password=admin_password,
            admin_name=admin_name,
            watch_interval_seconds=watch_interval_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
