"""Logging setup shared by the CLI and the library.

- Every module asks `get_logger(__name__)` for a child of `avatar_fetch`.
- `configure_logging` installs a single Rich handler; calling it again only
  updates the level.
"""

from __future__ import annotations

import logging
import threading

from rich.console import Console
from rich.logging import RichHandler

LOG_NAME = "avatar_fetch"

_lock = threading.Lock()
_handler: logging.Handler | None = None


def get_logger(name: str | None = None) -> logging.Logger:
    if not name or name == LOG_NAME:
        return logging.getLogger(LOG_NAME)
    if name.startswith(f"{LOG_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOG_NAME}.{name}")


def configure_logging(level: str | int = "WARNING", *, console: Console | None = None) -> logging.Logger:
    """Attach a `RichHandler` to the package logger (idempotent)."""

    global _handler

    root = logging.getLogger(LOG_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.WARNING

    with _lock:
        if _handler is None:
            _handler = RichHandler(
                console=console or Console(stderr=True),
                show_path=False,
                rich_tracebacks=False,
                markup=False,
            )
            _handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
            root.addHandler(_handler)
            root.propagate = False
        root.setLevel(level)
        # httpx logs every request at INFO; keep it quiet unless debugging.
        logging.getLogger("httpx").setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

    return root
