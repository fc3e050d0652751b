"""YAML configuration file reader."""

from pathlib import Path
from typing import Any

import yaml

from monteur.core.exceptions.errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"

# Top-level keys of a configuration file, one per settings section
SECTIONS = ("workspace", "fetcher", "build", "selection", "output", "logging")


class ConfigLoader:
    """Reads a configuration file made of named settings sections.

    Example::

        selection:
          tie_breakers: [unclassified, largest, newest]
        output:
          dir: /srv/artifacts
    """

    def __init__(self, config_path: Path) -> None:
        """Initialize the config loader.

        Args:
            config_path: Path to the YAML file.
        """
        self.config_path = config_path
        self._sections: dict[str, dict[str, Any]] = {}

    def load(self) -> dict[str, dict[str, Any]]:
        """Parse the file into its sections.

        Returns:
            Mapping of section name to that section's values.

        Raises:
            ConfigurationError: If the file is missing, is not valid YAML,
                or has an unknown or non-mapping section.
        """
        try:
            with open(self.config_path, encoding="utf-8") as f:
                document = yaml.safe_load(f) or {}
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"Configuration file not found: {self.config_path}",
                config_key=str(self.config_path),
            ) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {self.config_path}",
                config_key=str(self.config_path),
                details={"error": str(e)},
            ) from e

        if not isinstance(document, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping of sections: {self.config_path}",
                config_key=str(self.config_path),
            )

        sections: dict[str, dict[str, Any]] = {}
        for name, values in document.items():
            if name not in SECTIONS:
                raise ConfigurationError(
                    f"Unknown configuration section '{name}'. Expected one of {SECTIONS}",
                    config_key=str(name),
                )
            if values is None:
                values = {}
            if not isinstance(values, dict):
                raise ConfigurationError(
                    f"Configuration section '{name}' must be a mapping",
                    config_key=str(name),
                )
            sections[name] = values

        self._sections = sections
        return sections

    def section(self, name: str) -> dict[str, Any]:
        """Values of one section; empty when the file does not set it."""
        return dict(self._sections.get(name, {}))
