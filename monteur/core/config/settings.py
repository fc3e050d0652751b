"""Application settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from monteur.core.config.loader import DEFAULT_CONFIG_PATH, ConfigLoader
from monteur.core.exceptions.errors import ConfigurationError

TIE_BREAKERS = ("unclassified", "newest", "largest")


class WorkspaceSettings(BaseSettings):
    """Workspace configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="MONTEUR_WORKSPACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_dir: Path | None = Field(
        default=None,
        description="Base directory for working directories (None = system temp)",
    )
    auto_cleanup: bool = Field(
        default=True,
        description="Remove the working directory when the run ends",
    )
    prefix: str = Field(
        default="monteur_",
        description="Working directory name prefix",
    )

    @field_validator("base_dir", mode="before")
    @classmethod
    def validate_base_dir(cls, v: str | None) -> Path | None:
        """Validate and convert base_dir to Path."""
        if v is None or v == "":
            return None
        return Path(v)


class FetcherSettings(BaseSettings):
    """Archive download settings."""

    model_config = SettingsConfigDict(
        env_prefix="MONTEUR_FETCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    connect_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Connection timeout in seconds",
    )
    read_timeout: float = Field(
        default=300.0,
        gt=0,
        description="Timeout between received chunks in seconds",
    )
    chunk_size: int = Field(
        default=64 * 1024,
        ge=1024,
        description="Download chunk size in bytes",
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify SSL certificates",
    )
    follow_redirects: bool = Field(
        default=True,
        description="Follow HTTP redirects",
    )
    user_agent: str = Field(
        default="monteur",
        description="User-Agent header sent with the download request",
    )


class BuildSettings(BaseSettings):
    """Build tool invocation settings."""

    model_config = SettingsConfigDict(
        env_prefix="MONTEUR_BUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    maven_executable: str = Field(
        default="mvn",
        description="Maven executable, resolved from PATH",
    )
    gradle_executable: str = Field(
        default="gradle",
        description="Gradle executable used when the project has no wrapper",
    )
    log_tool_version: bool = Field(
        default=True,
        description="Log the Maven version before building",
    )
    env: dict[str, str] = Field(
        default_factory=dict,
        description="Extra environment variables for the build process",
    )


class SelectionSettings(BaseSettings):
    """Artifact selection policy."""

    model_config = SettingsConfigDict(
        env_prefix="MONTEUR_SELECTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    extensions: list[str] = Field(
        default_factory=lambda: [".jar"],
        description="File extensions of packaged artifacts",
    )
    excluded_classifiers: list[str] = Field(
        default_factory=lambda: [
            "sources",
            "javadoc",
            "test-sources",
            "test-javadoc",
            "tests",
        ],
        description="Classifiers that are never the deployable artifact",
    )
    known_classifiers: list[str] = Field(
        default_factory=lambda: [
            "plain",
            "all",
            "shaded",
            "jar-with-dependencies",
            "exec",
            "boot",
            "original",
            "runner",
            "uber",
            "fat",
        ],
        description="Other classifiers recognised in artifact file names",
    )
    tie_breakers: list[str] = Field(
        default_factory=lambda: list(TIE_BREAKERS),
        description="Ordered tie-break rules applied to the remaining candidates",
    )

    @field_validator("extensions", mode="after")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Normalise extensions to a lower-case, dot-prefixed form."""
        normalised = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalised.append(ext if ext.startswith(".") else f".{ext}")
        if not normalised:
            raise ValueError("At least one artifact extension is required")
        return normalised

    @field_validator("excluded_classifiers", "known_classifiers", mode="after")
    @classmethod
    def validate_classifiers(cls, v: list[str]) -> list[str]:
        """Lower-case classifier names."""
        return [c.strip().lower() for c in v if c.strip()]

    @field_validator("tie_breakers", mode="after")
    @classmethod
    def validate_tie_breakers(cls, v: list[str]) -> list[str]:
        """Validate tie-break rule names."""
        for rule in v:
            if rule not in TIE_BREAKERS:
                raise ValueError(
                    f"Unknown tie-break rule: {rule}. Must be one of {TIE_BREAKERS}"
                )
        if len(set(v)) != len(v):
            raise ValueError("Tie-break rules must not repeat")
        return v


class OutputSettings(BaseSettings):
    """Published artifact location."""

    model_config = SettingsConfigDict(
        env_prefix="MONTEUR_OUTPUT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    dir: Path = Field(
        default=Path("output"),
        description="Directory the selected artifact is copied into",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="MONTEUR_LOGGING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = Field(
        default="INFO",
        description="Log level",
    )
    format: str = Field(
        default="[%(name)s] %(message)s",
        description="Log format string",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    use_rich: bool = Field(
        default=True,
        description="Use Rich console for output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: str | None) -> Path | None:
        """Validate and convert file to Path."""
        if v is None or v == "":
            return None
        return Path(v)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="MONTEUR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    workspace: WorkspaceSettings = Field(default_factory=WorkspaceSettings)
    fetcher: FetcherSettings = Field(default_factory=FetcherSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from YAML file.

        Values from the file take precedence over environment variables
        for the keys the file sets.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Settings instance with values from YAML.

        Raises:
            ConfigurationError: If the file is unreadable or holds invalid values.
        """
        loader = ConfigLoader(path)
        loader.load()

        try:
            return cls(
                workspace=WorkspaceSettings(**loader.section("workspace")),
                fetcher=FetcherSettings(**loader.section("fetcher")),
                build=BuildSettings(**loader.section("build")),
                selection=SelectionSettings(**loader.section("selection")),
                output=OutputSettings(**loader.section("output")),
                logging=LoggingSettings(**loader.section("logging")),
            )
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration in {path}",
                config_key=str(path),
                details={"errors": e.errors(include_url=False)},
            ) from e

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from default locations.

        Priority: config/default.yaml > environment variables > .env > defaults

        Returns:
            Settings instance.
        """
        if DEFAULT_CONFIG_PATH.exists():
            return cls.from_yaml(DEFAULT_CONFIG_PATH)

        try:
            return cls()
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid configuration in environment",
                details={"errors": e.errors(include_url=False)},
            ) from e


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings singleton.
    """
    return Settings.load()
