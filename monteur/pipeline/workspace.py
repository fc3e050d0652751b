"""Per-run working directories."""

import shutil
import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from monteur.core.config.settings import WorkspaceSettings, get_settings
from monteur.core.exceptions.errors import WorkspaceError
from monteur.core.logger.logger import get_logger
from monteur.models.workspace import WorkspaceInfo, WorkspaceStatus

logger = get_logger(__name__)


class WorkspaceManager:
    """Creates and removes the working directory of a pipeline run."""

    def __init__(self, settings: WorkspaceSettings | None = None) -> None:
        """Initialize the workspace manager.

        Args:
            settings: Workspace settings. Uses global settings if not provided.
        """
        self.settings = settings or get_settings().workspace

    def _base_dir(self) -> Path:
        """Directory the working directories are created in."""
        if self.settings.base_dir:
            self.settings.base_dir.mkdir(parents=True, exist_ok=True)
            return self.settings.base_dir
        return Path(tempfile.gettempdir())

    def create(self, source_url: str) -> WorkspaceInfo:
        """Create a uniquely named, owner-only working directory.

        Args:
            source_url: URL of the archive the run builds.

        Raises:
            WorkspaceError: If the directory cannot be created.
        """
        try:
            path = Path(tempfile.mkdtemp(prefix=self.settings.prefix, dir=self._base_dir()))
        except OSError as e:
            raise WorkspaceError(
                "Failed to create workspace directory",
                workspace_path=str(self.settings.base_dir or tempfile.gettempdir()),
                details={"error": str(e)},
            ) from e

        logger.debug(f"Created workspace {path}")
        return WorkspaceInfo(path=path, source_url=source_url)

    def cleanup(self, workspace: WorkspaceInfo) -> bool:
        """Remove a working directory and everything in it.

        A directory that cannot be removed is logged, not raised, so a
        cleanup never masks the run's own error.

        Returns:
            True if the directory no longer exists.
        """
        try:
            shutil.rmtree(workspace.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove workspace {workspace.path}: {e}")
            return False
        finally:
            workspace.status = WorkspaceStatus.DISPOSED

        logger.debug(f"Removed workspace {workspace.path}")
        return True

    @contextmanager
    def workspace(self, source_url: str) -> Generator[WorkspaceInfo, None, None]:
        """Provide a working directory that is removed on every exit path.

        With ``auto_cleanup`` disabled the directory is kept for inspection.
        """
        workspace = self.create(source_url)
        try:
            yield workspace
        finally:
            if self.settings.auto_cleanup:
                self.cleanup(workspace)
            else:
                logger.info(f"Keeping workspace {workspace.path} (auto_cleanup disabled)")
