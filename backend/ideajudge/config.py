"""Runtime configuration read from the environment.

Values are looked up when ``get_settings()`` is called so that ``.env``
files loaded by ``main`` and test monkeypatching both take effect.

Environment variables
---------------------
IDEAJUDGE_DATA_DIR     JSON store root (default ``./data``)
IDEAJUDGE_TEMP_DIR     scratch directory for PDF export (default ``./temp``)
IDEAJUDGE_PDF_COMMAND  converter template, ``{markdown}`` / ``{pdf}`` are substituted
IDEAJUDGE_PDF_TIMEOUT  converter timeout in seconds (default 60)
IDEAJUDGE_RANDOM_SEED  optional integer seed for template / confidence choices
CORS_ORIGINS           comma-separated allowed origins
LOG_LEVEL              logging level name (default INFO)
DEBUG                  "true" exposes exception detail in 500 responses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

_DEFAULT_PDF_COMMAND = "pandoc {markdown} -o {pdf}"
_DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",      # Next.js dev server
    "http://127.0.0.1:3000",
    "http://localhost:3001",
]


def env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def env_bool(key: str, default: bool = False) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _optional_int(key: str) -> Optional[int]:
    raw = os.getenv(key, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    temp_dir: Path
    pdf_command: str = _DEFAULT_PDF_COMMAND
    pdf_timeout: float = 60.0
    random_seed: Optional[int] = None
    cors_origins: List[str] = field(default_factory=lambda: list(_DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"
    debug: bool = False


def get_settings() -> Settings:
    """Build a ``Settings`` snapshot from the current environment."""
    origins_raw = os.getenv("CORS_ORIGINS", "").strip()
    origins = (
        [o.strip() for o in origins_raw.split(",") if o.strip()]
        if origins_raw
        else list(_DEFAULT_CORS_ORIGINS)
    )
    return Settings(
        data_dir=Path(os.getenv("IDEAJUDGE_DATA_DIR", "data")),
        temp_dir=Path(os.getenv("IDEAJUDGE_TEMP_DIR", "temp")),
        pdf_command=os.getenv("IDEAJUDGE_PDF_COMMAND", _DEFAULT_PDF_COMMAND).strip() or _DEFAULT_PDF_COMMAND,
        pdf_timeout=env_float("IDEAJUDGE_PDF_TIMEOUT", 60.0),
        random_seed=_optional_int("IDEAJUDGE_RANDOM_SEED"),
        cors_origins=origins,
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        debug=env_bool("DEBUG"),
    )
