"""Logging system with Rich support.

Monteur's own messages go through per-module loggers. The build tool's
console output is relayed line by line on the ``monteur.build`` logger and
rendered with a gutter so it stands apart from pipeline messages.
"""

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from monteur.core.config.settings import LoggingSettings, get_settings

BUILD_OUTPUT_LOGGER = "monteur.build"
BUILD_OUTPUT_GUTTER = "  | "


class BuildOutputFormatter(logging.Formatter):
    """Formats relayed build tool lines with a gutter and nothing else."""

    def format(self, record: logging.LogRecord) -> str:
        if record.name == BUILD_OUTPUT_LOGGER:
            return BUILD_OUTPUT_GUTTER + record.getMessage()
        return super().format(record)


def setup_logging(settings: LoggingSettings | None = None, level: str | None = None) -> None:
    """Configure the root logger for a CLI run.

    Args:
        settings: Logging settings. Uses global settings if not provided.
        level: Overrides the configured level (e.g. "DEBUG" for --verbose).
    """
    if settings is None:
        settings = get_settings().logging

    log_level = getattr(logging, (level or settings.level).upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    # stdout is reserved for the result summary
    handler: logging.Handler
    if settings.use_rich:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(BuildOutputFormatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(BuildOutputFormatter(settings.format))
    root_logger.addHandler(handler)

    if settings.file:
        settings.file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (typically ``__name__``).

    Handlers are installed once by ``setup_logging``; until then records
    follow the host application's logging configuration.
    """
    return logging.getLogger(name)
