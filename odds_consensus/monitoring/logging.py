"""Structured logging configuration using structlog.

- JSON output in production mode (filterable, parseable)
- Colored console output in development mode (human-readable)

Usage:
    from odds_consensus.monitoring import configure_logging, get_logger

    configure_logging("production")

    log = get_logger()
    log.info("odds_fetched", game_count=5, sport="basketball_nba")
    log.warning("low_api_credits", remaining=25)
"""

import logging
import sys

import structlog


def configure_logging(mode: str = "development", level: int = logging.INFO) -> None:
    """Configure structlog for the application.

    Args:
        mode: Either "production" (JSON output) or "development" (colored console)
        level: Minimum stdlib log level
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if mode == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (defaults to caller's module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
