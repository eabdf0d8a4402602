"""Loguru setup for the service.

Records are JSON lines in deployed environments and colored text in
development. Fields bound with ``bind_context`` (request id, method, path,
acting user) are attached to every record emitted while a request is being
handled, and fields whose names look like credentials are masked. Records
from the standard ``logging`` module (uvicorn, asyncpg, httpx) are routed
through the same sinks.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
from loguru import logger


if TYPE_CHECKING:
    from typing import Any


_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

# Library loggers only worth seeing at WARNING and above
_QUIET_LIBRARIES = ("uvicorn", "uvicorn.access", "asyncpg", "httpx", "httpcore")

_MASKED_FIELDS = frozenset({"authorization", "password", "secret", "token"})
_MASK = "***"


def _masked(extra: dict[str, Any]) -> dict[str, Any]:
    return {
        key: _MASK if any(word in key.lower() for word in _MASKED_FIELDS) else value
        for key, value in extra.items()
        if not key.startswith("_")
    }


def _attach_request_context(record: dict[str, Any]) -> None:
    # Values passed at the call site win over request context
    for key, value in _log_context.get().items():
        record["extra"].setdefault(key, value)


class InterceptHandler(logging.Handler):
    """Forward standard library records to loguru with the caller's frame."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(
            name=record.name
        ).log(level, record.getMessage())


def _json_line(record: dict[str, Any]) -> str:
    fields = _masked(record["extra"])
    document: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": fields.pop("name", record["name"]),
        "message": record["message"],
        "location": f"{record['function']}:{record['line']}",
        **fields,
    }
    if record["exception"] is not None:
        exc_type, exc_value, _ = record["exception"]
        document["error"] = {
            "type": exc_type.__name__ if exc_type else None,
            "detail": str(exc_value) if exc_value else None,
        }

    # Handed to loguru through extra so braces in the JSON are not parsed
    record["extra"]["_rendered"] = orjson.dumps(document, default=str).decode()
    return "{extra[_rendered]}\n"


def _text_line(record: dict[str, Any]) -> str:
    fields = _masked(record["extra"])
    fields.pop("name", None)
    pairs = " ".join(f"{key}={value!r}" for key, value in fields.items())
    tail = f" | {pairs}" if pairs else ""
    tail = tail.replace("{", "{{").replace("}", "}}")

    line = (
        "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <7}</level> "
        "<cyan>{extra[name]}</cyan> {message}" + tail + "\n"
    )
    if record["exception"] is not None:
        line += "{exception}\n"
    return line


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    *,
    is_development: bool = False,
    log_file: Path | str | None = None,
) -> None:
    """Replace loguru's default sink with the service's sinks.

    Args:
        log_level: Minimum level name, case-insensitive.
        log_format: ``json`` or ``text``; development always uses text.
        is_development: Colored text output with variable values in tracebacks.
        log_file: Also write JSON lines here, rotated at 100 MB.
    """
    level = log_level.upper()
    as_json = log_format == "json" and not is_development

    logger.remove()
    logger.configure(
        extra={"name": "recipe_engagement"},
        patcher=_attach_request_context,
    )
    logger.add(
        sys.stdout,
        level=level,
        format=_json_line if as_json else _text_line,
        colorize=not as_json,
        backtrace=True,
        diagnose=is_development,
    )
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            level=level,
            format=_json_line,
            rotation="100 MB",
            retention="7 days",
            compression="gz",
            diagnose=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Loguru logger tagged with ``name``; keyword arguments become fields."""
    return logger.bind(name=name)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every record for the rest of the current request."""
    _log_context.set({**_log_context.get(), **kwargs})


def clear_context() -> None:
    _log_context.set({})


__all__ = [
    "bind_context",
    "clear_context",
    "get_logger",
    "setup_logging",
]
