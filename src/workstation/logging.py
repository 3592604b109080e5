"""Logging configuration."""
import datetime
import json
import logging
import os
import sys
from typing import Any, List, Optional, Tuple

import structlog
from rich.console import Console
from rich.highlighter import NullHighlighter
from rich.logging import RichHandler
from structlog.types import EventDict, Processor

DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVEL_ENV = "WORKSTATION_LOG_LEVEL"
IGNORED_LOGGERS = [
    "aiohttp",
    "asyncio",
]


def add_timestamp(_, __, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to the event dict."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.datetime.now(datetime.timezone.utc).isoformat()
    return event_dict


class CompactJSONRenderer:
    """Single-line JSON renderer with minimal output."""

    def __call__(self, _: Any, __: str, event_dict: EventDict) -> str:
        items = {
            "ts": event_dict.pop("timestamp", None),
            "lvl": event_dict.pop("level", "???"),
            "logger": event_dict.pop("logger", None),
            "msg": event_dict.pop("event", ""),
        }
        if event_dict:
            items["data"] = event_dict
        return json.dumps(items, separators=(",", ":"), default=str)


def resolve_level(level: Optional[str] = None) -> str:
    """Pick the log level from the argument, the environment, or the default."""
    name = (level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(name), int):
        raise ValueError(f"Unknown log level: {name}")
    return name


def _make_handler(console: Optional[Console]) -> Tuple[logging.Handler, bool]:
    """Pick the handler and whether output is interactive.

    A live progress display owns the terminal; while it runs, log lines must
    be printed through its console so they land above the bars.
    """
    if console is not None and console.is_terminal:
        handler: logging.Handler = RichHandler(
            console=console,
            show_time=False,
            show_level=False,
            show_path=False,
            markup=False,
            highlighter=NullHighlighter(),
        )
        return handler, True

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler, sys.stderr.isatty()


def configure_logging(level: Optional[str] = None, console: Optional[Console] = None) -> None:
    """Configure structured logging for the application.

    Output goes through ``console`` when it is a terminal (the progress
    display's console), otherwise to STDERR:
    - TTY: console rendering
    - otherwise: compact single-line JSON
    """
    level_name = resolve_level(level)

    app_logger = logging.getLogger("workstation")
    app_logger.handlers = []
    handler, interactive = _make_handler(console)
    app_logger.addHandler(handler)
    app_logger.setLevel(level_name)
    app_logger.propagate = False

    for name in IGNORED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: List[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if interactive:
        processors += [
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            # rich styles the line itself; raw ANSI would be printed literally
            structlog.dev.ConsoleRenderer(colors=not isinstance(handler, RichHandler)),
        ]
    else:
        processors += [add_timestamp, CompactJSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    if not name.startswith("workstation"):
        name = f"workstation.{name}"
    return structlog.get_logger(name)
