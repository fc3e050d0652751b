"""Tests for logging setup."""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from monteur.core.config.settings import LoggingSettings
from monteur.core.logger.logger import (
    BUILD_OUTPUT_LOGGER,
    BuildOutputFormatter,
    setup_logging,
)


def make_record(name: str, message: str, level: int = logging.INFO) -> logging.LogRecord:
    """Create a log record as a logger named ``name`` would."""
    return logging.LogRecord(name, level, __file__, 1, message, None, None)


@contextmanager
def isolated_root_logger() -> Generator[logging.Logger, None, None]:
    """Let setup_logging reconfigure the root logger, then put it back."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    try:
        yield root
    finally:
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)


class TestBuildOutputFormatter:
    """Tests for build output rendering."""

    def test_build_lines_get_gutter_only(self) -> None:
        """Relayed tool output keeps its text and gets no level or name."""
        formatter = BuildOutputFormatter("%(levelname)s [%(name)s] %(message)s")
        record = make_record(BUILD_OUTPUT_LOGGER, "[INFO] BUILD SUCCESS")

        assert formatter.format(record) == "  | [INFO] BUILD SUCCESS"

    def test_pipeline_messages_use_format(self) -> None:
        """Other records use the configured format."""
        formatter = BuildOutputFormatter("%(levelname)s [%(name)s] %(message)s")
        record = make_record("monteur.pipeline.orchestrator", "Pipeline state: building")

        assert formatter.format(record) == (
            "INFO [monteur.pipeline.orchestrator] Pipeline state: building"
        )


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_plain_handler(self) -> None:
        """Without Rich a single stderr handler with the build formatter is installed."""
        with isolated_root_logger() as root:
            setup_logging(LoggingSettings(use_rich=False, level="WARNING"))

            assert root.level == logging.WARNING
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, BuildOutputFormatter)

    def test_level_override(self) -> None:
        """An explicit level wins over the configured one."""
        with isolated_root_logger() as root:
            setup_logging(LoggingSettings(use_rich=False, level="INFO"), level="DEBUG")

            assert root.level == logging.DEBUG

    def test_log_file(self, temp_dir: Path) -> None:
        """A log file receives records with timestamps and levels."""
        log_file = temp_dir / "logs" / "monteur.log"

        with isolated_root_logger() as root:
            setup_logging(LoggingSettings(use_rich=False, file=log_file))
            logging.getLogger("monteur.test").warning("written to file")
            for handler in root.handlers:
                handler.flush()

        assert "WARNING - written to file" in log_file.read_text()
