"""Logging configuration for bootmeta.

Structured logging via loguru. Logging is disabled by default (library
behaviour) and enabled by the program embedding bootmeta:

    from bootmeta.logging import LogConfig, setup_logging, teardown_logging

    handler_ids = setup_logging(LogConfig(level="DEBUG"))
    try:
        metadata = provider.fetch_metadata()
    finally:
        teardown_logging(handler_ids)
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Literal, TypeAlias

from loguru import logger

logger.disable("bootmeta")

LogLevel: TypeAlias = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} - {message}"
)


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Logging configuration.

    Attributes:
        level: Minimum log level for the console.
        file: Path to a log file. If provided, logs are also written there.
        console: Whether to log to stderr. Defaults to True.
        rotation: File rotation policy (e.g., "10 MB").
        retention: Number of old log files to keep.
    """

    level: LogLevel = "INFO"
    file: str | None = None
    console: bool = True
    rotation: str = "10 MB"
    retention: int = 5


def setup_logging(config: LogConfig) -> list[int]:
    """Enable bootmeta logging and return handler IDs for cleanup."""
    logger.enable("bootmeta")
    handler_ids: list[int] = []

    # stdout is left to the caller
    if config.console:
        hid = logger.add(
            sys.stderr,
            level=config.level,
            format=CONSOLE_FORMAT,
            colorize=True,
            filter="bootmeta",
        )
        handler_ids.append(hid)

    if config.file:
        hid = logger.add(
            config.file,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation=config.rotation,
            retention=config.retention,
            diagnose=False,
            filter="bootmeta",
        )
        handler_ids.append(hid)

    return handler_ids


def teardown_logging(handler_ids: list[int]) -> None:
    """Remove handlers and disable logging again."""
    for hid in handler_ids:
        logger.remove(hid)
    logger.disable("bootmeta")
