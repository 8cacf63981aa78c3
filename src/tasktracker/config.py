# src/tasktracker/config.py

"""Centralized settings loaded from an optional JSON file and environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app, built once at startup.
- No secrets required at import time; validation happens in Settings.validate().
- The legacy appsettings.json layout (StoragePath, ...) is still understood.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

ENV_PREFIX = "TASKTRACKER"

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Required configuration is missing or malformed. Fatal at startup."""


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


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


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    parts = [p.strip() for p in raw.replace(",", " ").split() if p.strip()]
    return parts


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _load_file_config(path: Path) -> dict[str, Any]:
    """
    Read the optional JSON settings file (appsettings.json layout).

    A missing file is not an error. A file that exists but is not a JSON object is.
    """
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text("utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    logger.debug("Loaded config file %s (keys=%s)", path, sorted(data))
    return data


def _file_str(data: dict[str, Any], key: str) -> str:
    val = data.get(key)
    if val is None:
        return ""
    return str(val).strip()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- Storage ----
    storage_path: Optional[Path]

    # ---- Connector flags ----
    console_enabled: bool
    matrix_enabled: bool

    # ---- Matrix ----
    matrix_homeserver: str
    matrix_user_id: str
    matrix_access_token: str
    matrix_password: str
    matrix_device_id: str
    matrix_store_path: Path
    matrix_rooms: List[str]

    # ---- Scheduler ----
    scheduler_interval_seconds: float
    notify_max_attempts: int

    @staticmethod
    def from_env(config_file: str | Path | None = None) -> "Settings":
        _load_dotenv_if_available()

        if config_file is None:
            config_file = _env(_k("CONFIG_FILE"), "appsettings.json")
        file_cfg = _load_file_config(Path(config_file).expanduser())

        app_name = _env(_k("APP_NAME"), "tasktracker")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tasktracker")) or Path(".local/tasktracker")
        log_dir = _env_path(_k("LOG_DIR"), data_dir) or data_dir

        file_storage = _file_str(file_cfg, "StoragePath")
        storage_path = _env_path(_k("STORAGE_PATH"), Path(file_storage).expanduser() if file_storage else None)

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        matrix_enabled = _env_bool(_k("MATRIX_ENABLED"), bool(_file_str(file_cfg, "MatrixHomeserver")))

        matrix_homeserver = (
            _first_env(_k("MATRIX_HOMESERVER"), "MATRIX_HOMESERVER", default="")
            or _file_str(file_cfg, "MatrixHomeserver")
        ).strip()
        matrix_user_id = (
            _first_env(_k("MATRIX_USER_ID"), "MATRIX_USER_ID", default="")
            or _file_str(file_cfg, "MatrixUserId")
        ).strip()
        matrix_access_token = (
            _first_env(_k("MATRIX_ACCESS_TOKEN"), "MATRIX_ACCESS_TOKEN", default="")
            or _file_str(file_cfg, "MatrixAccessToken")
        ).strip()
        matrix_password = (
            _first_env(_k("MATRIX_PASSWORD"), "MATRIX_PASSWORD", default="")
            or _file_str(file_cfg, "MatrixPassword")
        ).strip()
        matrix_device_id = _env(_k("MATRIX_DEVICE_ID"), "").strip()
        matrix_store_path = _env_path(_k("MATRIX_STORE_PATH"), data_dir / "matrix_store") or data_dir / "matrix_store"
        matrix_rooms = _env_list(_k("MATRIX_ROOMS"), [])

        scheduler_interval_seconds = _env_float(_k("SCHEDULER_INTERVAL_SECONDS"), 60.0)
        notify_max_attempts = _env_int(_k("NOTIFY_MAX_ATTEMPTS"), 5)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            storage_path=storage_path,
            console_enabled=console_enabled,
            matrix_enabled=matrix_enabled,
            matrix_homeserver=matrix_homeserver,
            matrix_user_id=matrix_user_id,
            matrix_access_token=matrix_access_token,
            matrix_password=matrix_password,
            matrix_device_id=matrix_device_id,
            matrix_store_path=matrix_store_path,
            matrix_rooms=matrix_rooms,
            scheduler_interval_seconds=scheduler_interval_seconds,
            notify_max_attempts=notify_max_attempts,
        )

    def validate(self) -> "Settings":
        """Raise ConfigError if a required field is missing. Returns self for chaining."""
        missing: list[str] = []

        if self.storage_path is None or str(self.storage_path).strip() == "":
            missing.append(f"{_k('STORAGE_PATH')} (or StoragePath in the config file)")

        if not self.console_enabled and not self.matrix_enabled:
            raise ConfigError("No connector enabled: enable the console and/or the Matrix connector")

        if self.matrix_enabled:
            if not self.matrix_homeserver:
                missing.append(_k("MATRIX_HOMESERVER"))
            if not self.matrix_user_id:
                missing.append(_k("MATRIX_USER_ID"))
            if not self.matrix_access_token and not self.matrix_password:
                missing.append(f"{_k('MATRIX_ACCESS_TOKEN')} or {_k('MATRIX_PASSWORD')}")

        if missing:
            raise ConfigError("Missing required configuration: " + ", ".join(missing))

        if self.notify_max_attempts < 1:
            raise ConfigError(f"{_k('NOTIFY_MAX_ATTEMPTS')} must be >= 1")

        return self


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Build settings on first use and reuse them afterwards (validated)."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env().validate()
    return _SETTINGS
