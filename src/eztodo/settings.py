from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - EZTODO_DATA_DIR: directory holding todos.json/plans.json/history.json. Default './data'
    - EZTODO_PERSIST_HISTORY: 'true' (default) to keep history.json next to the other collections
    - EZTODO_MAX_OCCURRENCES: max todos generated per plan by a single refresh (default 366)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: level for the 'eztodo' logger (default INFO)
    - EZTODO_LOG_DIR: optional directory for a rotating log file
    """

    data_dir: Path
    persist_history: bool
    max_occurrences_per_plan: int
    cors_allow_origins: List[str]
    log_level: str
    log_dir: Optional[Path]

    @property
    def todos_path(self) -> Path:
        return self.data_dir / "todos.json"

    @property
    def plans_path(self) -> Path:
        return self.data_dir / "plans.json"

    @property
    def history_path(self) -> Optional[Path]:
        return self.data_dir / "history.json" if self.persist_history else None


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_positive_int(value: str, default: int) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= 1 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    data_dir = Path(_get_env("EZTODO_DATA_DIR", "./data").strip())
    persist_history = _parse_bool(_get_env("EZTODO_PERSIST_HISTORY", "true"), True)
    max_occurrences = _parse_positive_int(_get_env("EZTODO_MAX_OCCURRENCES", "366"), 366)
    origins = _parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*"))
    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    log_dir_raw = os.getenv("EZTODO_LOG_DIR")

    return Settings(
        data_dir=data_dir,
        persist_history=persist_history,
        max_occurrences_per_plan=max_occurrences,
        cors_allow_origins=origins,
        log_level=log_level,
        log_dir=Path(log_dir_raw) if log_dir_raw else None,
    )
