"""Structured JSON logging with an async-safe browsing session ID.

Every log line carries the session_id of the browser session that
produced it, so page fetches and the detail fetches they fan out into
can be grouped after the fact.
"""

import json
import logging
from contextvars import ContextVar
from datetime import datetime, timezone

from festivalscope.core.types import Browsing, Searching

# Propagates through await chains and into tasks created under it
session_id: ContextVar[str] = ContextVar("session_id", default="")

_EXTRA_FIELDS = ("identifier", "page", "mode", "source", "duration_ms")


def get_session_id() -> str:
    """Return the current session ID, or empty string if not set."""
    return session_id.get()


def mode_label(mode: Browsing | Searching) -> str:
    """Compact log form of a fetch mode: ``browse``, ``browse:area=6`` or ``search:부산``."""
    if isinstance(mode, Searching):
        return f"search:{mode.keyword}"
    if mode.params.area_code:
        return f"browse:area={mode.params.area_code}"
    return "browse"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        sid = session_id.get()
        if sid:
            log_entry["session_id"] = sid

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if isinstance(val, (Browsing, Searching)):
                val = mode_label(val)
            if val is not None:
                log_entry[key] = val

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Configure root logger with JSON or text format.

    Args:
        json_format: True for JSON (production), False for text (local dev).
        level: Log level string (DEBUG, INFO, WARNING, ERROR).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    root.handlers.clear()

    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    root.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
