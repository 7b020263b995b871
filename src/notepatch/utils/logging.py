"""Structured logging setup for notepatch."""

import os
from pathlib import Path
from typing import Any

import structlog

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def configure_logging() -> None:
    """
    Send JSON log lines to ~/.cache/notepatch/logs/notepatch.log.

    NOTEPATCH_LOG_LEVEL selects the level (default INFO). DEBUG adds every
    edit step and anchor lookup; WARNING and up keeps rejected proposals,
    ambiguous anchors and failed writes.

    Example:
        NOTEPATCH_LOG_LEVEL=DEBUG notepatch apply groceries proposal.json
        tail -f ~/.cache/notepatch/logs/notepatch.log | jq .
    """
    log_dir = Path.home() / ".cache" / "notepatch" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    log_level = os.environ.get("NOTEPATCH_LOG_LEVEL", "INFO").upper()
    if log_level not in LOG_LEVELS:
        log_level = "INFO"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_dir / "notepatch.log", "a")),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Structured logger bound to ``name`` (usually the caller's __name__)."""
    return structlog.get_logger(name)
