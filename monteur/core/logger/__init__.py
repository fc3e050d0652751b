"""Logging module."""

from monteur.core.logger.logger import (
    BUILD_OUTPUT_LOGGER,
    BuildOutputFormatter,
    get_logger,
    setup_logging,
)

__all__ = ["BUILD_OUTPUT_LOGGER", "BuildOutputFormatter", "get_logger", "setup_logging"]
