"""Observability: structured logging helpers."""

from festivalscope.observability.logging import get_session_id, setup_logging

__all__ = ["get_session_id", "setup_logging"]
