from __future__ import annotations

import logging
import sys


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the operator console readable:
    - all dark_todo logs pass
    - third-party libraries (uvicorn access, httpx) only at WARNING and above
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("dark_todo"):
            return True
        if record.name == "py.warnings":
            return record.levelno >= logging.ERROR
        return record.levelno >= logging.WARNING


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with one filtered stderr handler.

    Call once, before the first log line. Calling again replaces the handler.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    root = logging.getLogger()
    root.setLevel(numeric)

    # Only our own handler is replaced; test harnesses keep theirs.
    for h in list(root.handlers):
        if getattr(h, "_dark_todo", False):
            root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    ch._dark_todo = True  # type: ignore[attr-defined]
    root.addHandler(ch)

    logging.captureWarnings(True)
