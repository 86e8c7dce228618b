"""structlog setup shared by the CLI, the builder and the dev server."""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor


def uppercase_level(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Record the level name the way stdlib logging prints it."""
    event_dict["level"] = method_name.upper()
    return event_dict


def resolve_level(log_level: str) -> int:
    """Map a level name onto its logging constant, defaulting to INFO."""
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def _shared_processors(json_output: bool) -> list[Processor]:
    final: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        uppercase_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        final,
    ]


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Route structlog events through stdlib logging on stderr.

    Stdout is left to click output and the progress bar.

    Args:
        log_level: Level name such as DEBUG or WARNING. Unknown names mean INFO.
        json_output: Emit one JSON object per event. The CLI turns this off
            to get plain console lines.
    """
    level = resolve_level(log_level)

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)
    # pytest installs its own handlers, so set the root level explicitly too
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=_shared_processors(json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)
