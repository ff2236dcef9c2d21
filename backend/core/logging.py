"""
Structured logging setup.

Modules only ever call ``structlog.get_logger()``; this function wires the
renderer and level once, from the CLI entry point.

Usage:
    from core.logging import configure_logging

    configure_logging(level="DEBUG", json_logs=False)
"""

import logging

import structlog


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure structlog for console or JSON output.

    Args:
        level: Logging level name (e.g. "DEBUG", "INFO", "WARNING").
        json_logs: Emit one JSON object per event instead of the dev console format.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
