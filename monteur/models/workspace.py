"""Working directory of a pipeline run."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class WorkspaceStatus(str, Enum):
    """Lifecycle of a run's working directory."""

    ACTIVE = "active"
    DISPOSED = "disposed"


class WorkspaceInfo(BaseModel):
    """The private directory holding one run's archive and extracted tree.

    Layout::

        <path>/archive.tar.gz   downloaded archive
        <path>/tree/            normalised project root
    """

    path: Path = Field(description="Absolute path of the working directory")
    source_url: str = Field(description="URL of the archive being built")
    status: WorkspaceStatus = WorkspaceStatus.ACTIVE

    @property
    def name(self) -> str:
        """Directory name, unique per run."""
        return self.path.name

    @property
    def archive_path(self) -> Path:
        """Location of the downloaded archive."""
        return self.path / "archive.tar.gz"

    @property
    def tree_path(self) -> Path:
        """Location of the normalised extracted tree."""
        return self.path / "tree"
