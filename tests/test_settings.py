from __future__ import annotations

import logging

from dark_todo.logging_setup import setup_logging
from dark_todo.settings import get_settings


def test_defaults(monkeypatch):
    for name in (
        "TASK_STORE_BACKEND",
        "SQLITE_DB_PATH",
        "SUPABASE_URL",
        "SUPABASE_KEY",
        "SUPABASE_TIMEOUT",
        "CORS_ALLOW_ORIGINS",
        "MOBILE_BREAKPOINT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    s = get_settings()
    assert s.task_store_backend == "memory"
    assert s.sqlite_db_path == "./data/tasks.db"
    assert s.supabase_url is None and s.supabase_key is None
    assert s.supabase_timeout == 10.0
    assert s.cors_allow_origins == ["*"]
    assert s.mobile_breakpoint == 768
    assert s.log_level == "INFO"


def test_overrides_and_fallbacks(monkeypatch):
    monkeypatch.setenv("TASK_STORE_BACKEND", "Supabase")
    monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co/")
    monkeypatch.setenv("SUPABASE_KEY", " anon ")
    monkeypatch.setenv("SUPABASE_TIMEOUT", "-3")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test ,")
    monkeypatch.setenv("MOBILE_BREAKPOINT", "wide")
    s = get_settings()
    assert s.task_store_backend == "supabase"
    assert s.supabase_url == "https://demo.supabase.co"
    assert s.supabase_key == "anon"
    assert s.supabase_timeout == 10.0
    assert s.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert s.mobile_breakpoint == 768


def test_unknown_backend_is_memory(monkeypatch):
    monkeypatch.setenv("TASK_STORE_BACKEND", "postgres")
    assert get_settings().task_store_backend == "memory"


def test_setup_logging_installs_single_handler():
    setup_logging("DEBUG")
    setup_logging("not-a-level")
    ours = [h for h in logging.getLogger().handlers if getattr(h, "_dark_todo", False)]
    assert len(ours) == 1
    assert logging.getLogger().level == logging.INFO
