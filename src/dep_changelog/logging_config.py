"""structlog setup for the CLI and the API.

Events are snake_case names with key/value context (`tag_fetch_failed`,
`missing_github_token`, ...). Output goes to stderr so the CLI can print its
JSON result on stdout.

Usage:
    setup_logging(environment="production")
    logger = get_logger(__name__)
    logger.info("changelog_assembled", repository="lodash/lodash", versions_count=3)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def setup_logging(
    environment: str | None = None,
    log_level: str | None = None,
) -> None:
    """Configure structured logging for the application.

    In development: Pretty-printed, colorized output for readability.
    In production: JSON output for log ingestion.

    Args:
        environment: "development" or "production". Reads from
                     ENVIRONMENT env var if not provided.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Reads from LOG_LEVEL env var if not provided.
    """
    env = environment or os.environ.get("ENVIRONMENT", "development")
    level = log_level or os.environ.get("LOG_LEVEL", "INFO")

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Standard library logging for third-party libs (httpx)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        A structlog bound logger
    """
    return structlog.get_logger(name)
