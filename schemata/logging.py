"""Structured logging for the validation engine.

- Colored, human-readable dev output
- JSON structured output for log pipelines
- Parse lifecycle events tagged with schema kind and mode
- Input values are never logged verbatim: sensitive keys are redacted
"""
import logging
import sys

import structlog
from structlog.types import EventDict, Processor

from .config import get_settings


def _censor_sensitive_keys(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Processor that redacts sensitive information."""
    sensitive_keys = {"password", "token", "secret", "authorization", "cookie", "api_key"}

    def _redact(obj: dict | list | str, depth: int = 0) -> dict | list | str:
        if depth > 5:
            return obj
        if isinstance(obj, dict):
            return {k: "[REDACTED]" if str(k).lower() in sensitive_keys else _redact(v, depth + 1) for k, v in obj.items()}
        if isinstance(obj, list):
            return [_redact(item, depth + 1) for item in obj]
        return obj

    return _redact(event_dict)


def _add_library_info(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Processor that tags events with the emitting library."""
    event_dict.setdefault("library", "schemata")
    return event_dict


def get_shared_processors() -> list[Processor]:
    """Processors used in both dev and JSON configurations."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_library_info,
        _censor_sensitive_keys,
    ]


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure the logging system.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to ``SCHEMATA_LOG_LEVEL``.
        json_logs: If True, output JSON. If False, colored console output. Defaults to ``SCHEMATA_LOG_JSON``.
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    shared_processors = get_shared_processors()

    if settings.LOG_JSON if json_logs is None else json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    library_logger = logging.getLogger("schemata")
    library_logger.handlers = [handler]
    library_logger.setLevel(log_level)
    library_logger.propagate = False


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module)
    """
    return structlog.get_logger(name)


class LoggerRegistry:
    """Registry of pre-configured loggers for the engine's domains."""

    _loggers: dict[str, structlog.stdlib.BoundLogger] = {}

    @classmethod
    def get(cls, name: str) -> structlog.stdlib.BoundLogger:
        """Get or create a logger for the given domain."""
        if name not in cls._loggers:
            cls._loggers[name] = get_logger(f"schemata.{name}")
        return cls._loggers[name]


def parse_logger() -> structlog.stdlib.BoundLogger:
    """Logger for parse lifecycle events."""
    return LoggerRegistry.get("parse")


def schema_logger() -> structlog.stdlib.BoundLogger:
    """Logger for schema construction events."""
    return LoggerRegistry.get("schema")
