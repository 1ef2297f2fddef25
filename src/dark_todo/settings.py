from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - TASK_STORE_BACKEND: 'memory' (default), 'sqlite' or 'supabase'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - SUPABASE_URL: project URL of the hosted table store (required for 'supabase')
    - SUPABASE_KEY: API key of the hosted table store (required for 'supabase')
    - SUPABASE_TIMEOUT: request timeout in seconds for the hosted store. Default 10
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - MOBILE_BREAKPOINT: viewport width at or below which the stacked layout is used. Default 768
    - LOG_LEVEL: console log level. Default 'INFO'
    """

    task_store_backend: str
    sqlite_db_path: str
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    supabase_timeout: float
    cors_allow_origins: List[str]
    mobile_breakpoint: int
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


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
    backend = _get_env("TASK_STORE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite", "supabase"}:
        # Fallback to memory if unsupported
        backend = "memory"

    sqlite_path = _get_env("SQLITE_DB_PATH", "./data/tasks.db").strip()
    supabase_url = (os.getenv("SUPABASE_URL") or "").strip().rstrip("/") or None
    supabase_key = (os.getenv("SUPABASE_KEY") or "").strip() or None
    supabase_timeout = _parse_float(_get_env("SUPABASE_TIMEOUT", "10"), 10.0)

    cors_raw = _get_env("CORS_ALLOW_ORIGINS", "*")
    origins = _parse_origins(cors_raw)

    breakpoint_px = _parse_int(_get_env("MOBILE_BREAKPOINT", "768"), 768)
    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()

    return Settings(
        task_store_backend=backend,
        sqlite_db_path=sqlite_path,
        supabase_url=supabase_url,
        supabase_key=supabase_key,
        supabase_timeout=supabase_timeout,
        cors_allow_origins=origins,
        mobile_breakpoint=breakpoint_px,
        log_level=log_level,
    )
