"""Build-related data models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class BuildVariant(str, Enum):
    """Supported build systems."""

    MAVEN = "maven"
    GRADLE = "gradle"


class BuildRequest(BaseModel):
    """Input of a pipeline run."""

    model_config = ConfigDict(frozen=True)

    source_url: str = Field(description="URL of the tar+gzip source archive")
    output_dir: Path = Field(description="Directory the artifact is published to")


class BuildCommand(BaseModel):
    """A resolved build tool invocation."""

    model_config = ConfigDict(frozen=True)

    variant: BuildVariant
    argv: list[str] = Field(description="Executable followed by its arguments")
    env_vars: dict[str, str] = Field(default_factory=dict)

    def __str__(self) -> str:
        """Return the command line as a single string."""
        return " ".join(self.argv)


class BuildOutcome(BaseModel):
    """Termination status of a build process.

    Attributes:
        success: Whether the process exited with status zero.
        return_code: Exit status; negative when the process was killed by a signal.
        signal: Signal number that terminated the process, if any.
        duration_seconds: Wall-clock build time.
        command: The command line that was executed.
        output_tail: Last lines of the combined stdout/stderr stream.
    """

    success: bool
    return_code: int
    signal: int | None = None
    duration_seconds: float = 0.0
    command: list[str] = Field(default_factory=list)
    output_tail: list[str] = Field(default_factory=list)


class ArtifactCandidate(BaseModel):
    """A build output file eligible for publishing."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(description="Absolute path of the file")
    size: int = Field(ge=0, description="File size in bytes")
    modified_ns: int = Field(description="Last-modified time in nanoseconds")
    classifier: str | None = Field(
        default=None,
        description="Classifier inferred from the file name, None for a plain artifact",
    )
    module: str = Field(
        default=".",
        description="Module directory relative to the project root",
    )

    @property
    def name(self) -> str:
        """File name of the artifact."""
        return self.path.name


class PublishedFile(BaseModel):
    """The artifact at its final location."""

    model_config = ConfigDict(frozen=True)

    path: Path
    source: Path
    size: int
