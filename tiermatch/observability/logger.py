"""Structured logging for tiermatch (structlog over stdlib logging).

Events are snake_case names with keyword context, e.g.
``logger.info("scan_completed", job_id=..., ai_analyzed=...)``.
Output goes to stderr so CLI output on stdout stays clean.
"""

import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict, Processor

APP_NAME = "tiermatch"
APP_VERSION = "0.3.0"


def _add_app(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["app"] = APP_NAME
    event_dict["version"] = APP_VERSION
    return event_dict


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: str | Path | None = None,
) -> None:
    """Configure structlog and the root stdlib handler.

    Args:
        log_level: Level name, e.g. "INFO"
        log_format: "json" for machine-readable lines, "console" for local runs
        log_file: Optional file that receives a copy of every line
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    renderers: list[Processor] = (
        [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]
        if log_format == "console"
        else [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _add_app,
            *renderers,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(format="%(message)s", level=level, handlers=handlers, force=True)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# Defaults until the CLI reconfigures from config/default.yaml
setup_logging()
