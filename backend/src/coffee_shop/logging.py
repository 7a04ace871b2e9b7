"""Structured logging configuration.

structlog on top of stdlib logging. Every record, including ones emitted by
third-party loggers (uvicorn, sqlalchemy), goes through the same processor
chain, so request-scoped context bound by the middleware (request_id) shows
up everywhere.
"""

import logging
import logging.config
import sys
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from structlog.stdlib import BoundLogger


def _add_timestamp(
    _logger: object,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Stamp the event with the current UTC time, e.g. 2026-01-05T09:30:00+00:00."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


class LoggingSettings(BaseSettings):
    """LOG_LEVEL and LOG_JSON, read from the environment or .env."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # JSON for log shippers; plain console lines are easier to read locally.
    log_json: bool = Field(default=True, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


def configure_logging(settings: LoggingSettings) -> None:
    """Install the processor chain for structlog and for plain stdlib loggers.

    ``settings.log_json`` picks the renderer; everything before the renderer
    is shared, so uvicorn and sqlalchemy records carry the request_id too.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": renderer,
                    "foreign_pre_chain": processors,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "structured",
                    "stream": sys.stdout,
                },
            },
            "loggers": {
                "": {
                    "handlers": ["default"],
                    "level": settings.log_level,
                    "propagate": True,
                },
                # RequestIDMiddleware already logs one line per request
                "uvicorn.access": {
                    "handlers": [],
                    "level": "WARNING",
                    "propagate": False,
                },
            },
        }
    )


# Output is set up on first import, before any coffee_shop logger is created
_settings = LoggingSettings()
configure_logging(_settings)


def get_logger(name: str) -> BoundLogger:
    """Logger for one coffee_shop module, named after it.

    Events are snake_case names with keyword fields:
        logger = get_logger(__name__)
        logger.info("coffee_created", coffee_id=3, name="Latte")
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]
