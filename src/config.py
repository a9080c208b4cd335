"""Settings loaded from environment variables (+ optional .env).

Priority: real env var > project .env > default. Invalid values fall
back to the default instead of failing at startup.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from models import DEFAULT_PRIORITY, PRIORITIES

ENV_PREFIX = "QUICKTASK"
PROJECT_ROOT = Path(__file__).resolve().parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

_TRUE_VALUES = {"1", "true", "yes", "on", "y"}
_FALSE_VALUES = {"0", "false", "no", "off", "n", ""}
_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(_k(name))
    return default if v is None else v.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(_k(name))
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(_k(name))
    if raw is None or raw.strip() == "":
        return default
    try:
        return max(minimum, int(raw))
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(_k(name))
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True)
class Settings:
    default_priority: str = DEFAULT_PRIORITY
    archive_days: int = 2
    data_file: Path = PROJECT_ROOT / "data" / "tasks.json"
    log_dir: Path = PROJECT_ROOT / ".local"
    log_level: str = "WARNING"
    alt_screen: bool = True

    @property
    def log_level_value(self) -> int:
        if self.log_level not in _LEVELS:
            return logging.WARNING
        return getattr(logging, self.log_level)


def load_settings(env_file: Optional[Path] = ENV_FILE) -> Settings:
    if env_file is not None and env_file.exists():
        load_dotenv(env_file, override=False)
    defaults = Settings()

    priority = _env("DEFAULT_PRIORITY", defaults.default_priority).lower()
    if priority not in PRIORITIES:
        priority = defaults.default_priority

    return Settings(
        default_priority=priority,
        archive_days=_env_int("ARCHIVE_DAYS", defaults.archive_days),
        data_file=_env_path("DATA_FILE", defaults.data_file),
        log_dir=_env_path("LOG_DIR", defaults.log_dir),
        log_level=_env("LOG_LEVEL", defaults.log_level).upper() or defaults.log_level,
        alt_screen=_env_bool("ALT_SCREEN", defaults.alt_screen),
    )
