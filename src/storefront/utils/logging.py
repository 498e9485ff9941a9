"""Logging configuration for the storefront.

Standard library logging carries the handlers: the console, plus rotating
files when ``log_to_files`` is on. structlog sits on top and renders
key-value events, JSON in production and staging and a rich console view
everywhere else. Every knob is read from ``storefront.config.settings``.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any

import structlog

from storefront.config import Settings, settings

_ENV_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
_STRUCTURED_ENVIRONMENTS = ("production", "staging")

_MAX_FILE_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5


def resolve_level(config: Settings) -> str:
    """The configured level, or the default for the configured environment."""
    if config.log_level:
        return config.log_level.upper()
    return _ENV_LEVELS.get(config.environment.lower(), "INFO")


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path, maxBytes=_MAX_FILE_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def _handlers(config: Settings, level: str, prefix: str) -> list[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    if not config.log_to_files:
        return [console]

    directory = Path(config.log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return [
        console,
        _rotating_file(directory / f"{prefix}.log", level),
        # Rejected webhook signatures and checkout failures are warnings
        _rotating_file(directory / f"{prefix}_error.log", logging.WARNING),
    ]


def _renderer(config: Settings):
    if config.environment.lower() in _STRUCTURED_ENVIRONMENTS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=4),
    )


def configure_logging(config: Settings | None = None, log_file_prefix: str = "storefront") -> None:
    """Configure stdlib handlers and structlog for the application."""
    config = config or settings
    level = resolve_level(config)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = _handlers(config, level, log_file_prefix)

    for name in config.quiet_logger_list():
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            _renderer(config),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(**kwargs: Any) -> None:
    """Attach key-value pairs (request id, path) to every log line of the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
