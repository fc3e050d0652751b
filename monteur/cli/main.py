"""Main CLI entry point for Monteur."""

import asyncio
import sys
from pathlib import Path

import click

from monteur import __version__
from monteur.cli.display import show_error, show_result, show_success
from monteur.core.config.settings import Settings, get_settings
from monteur.core.exceptions.errors import ConfigurationError, MonteurError, StageError
from monteur.core.logger.logger import get_logger, setup_logging
from monteur.models.build import BuildRequest
from monteur.pipeline.orchestrator import BuildPipeline

logger = get_logger(__name__)

EXIT_INTERRUPTED = 130


def load_settings(config_path: Path | None) -> Settings:
    """Load settings from ``config_path`` or the default locations."""
    if config_path is not None:
        return Settings.from_yaml(config_path)
    return get_settings()


def describe_error(error: MonteurError) -> str:
    """Return a panel title naming the failed stage and condition."""
    if isinstance(error, StageError):
        stage = type(error).__name__.removesuffix("Error")
        if error.reason is not None:
            return f"{stage} failed ({error.reason.value})"
        return f"{stage} failed"
    return type(error).__name__


@click.command()
@click.argument("url")
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to publish the artifact to (default: MONTEUR_OUTPUT_DIR)",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, "--version", prog_name="monteur")
def main(url: str, output_dir: Path | None, config_path: Path | None, verbose: bool) -> None:
    """Build the Java project in the tar.gz archive at URL and publish its artifact.

    Example:
        monteur https://example.com/project.tar.gz --output-dir ./dist
    """
    try:
        settings = load_settings(config_path)
    except ConfigurationError as e:
        show_error("Configuration Error", str(e))
        sys.exit(e.exit_code)

    setup_logging(settings.logging, level="DEBUG" if verbose else None)

    request = BuildRequest(
        source_url=url,
        output_dir=output_dir or settings.output.dir,
    )
    pipeline = BuildPipeline(settings)

    try:
        result = asyncio.run(pipeline.run(request))
    except MonteurError as e:
        show_error(describe_error(e), str(e))
        sys.exit(e.exit_code)
    except KeyboardInterrupt:
        show_error("Interrupted", "Build interrupted; working directory removed")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        logger.exception("Unexpected error")
        show_error("Unexpected Error", f"{type(e).__name__}: {e}")
        sys.exit(1)

    show_result(result)
    show_success("Success", f"Published {result.published.path}")


if __name__ == "__main__":
    main()
