"""Publisher - delivers the selected artifact to the output directory."""

import os
import shutil
import tempfile
from pathlib import Path

from monteur.core.exceptions.errors import PublishError, PublishFailure
from monteur.core.logger.logger import get_logger
from monteur.models.build import ArtifactCandidate, PublishedFile

logger = get_logger(__name__)


class Publisher:
    """Copies an artifact into the output directory under its own name.

    An existing file of the same name is replaced atomically.
    """

    def __init__(self, output_dir: Path) -> None:
        """Initialize the publisher.

        Args:
            output_dir: Directory the artifact is published to.
        """
        self.output_dir = output_dir

    def publish(self, artifact: ArtifactCandidate) -> PublishedFile:
        """Copy ``artifact`` into the output directory.

        Args:
            artifact: The selected artifact.

        Returns:
            PublishedFile describing the copy.

        Raises:
            PublishError: If the directory cannot be created or the copy fails.
        """
        destination = self.output_dir / artifact.name

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{artifact.name}.", suffix=".tmp", dir=self.output_dir
            )
            os.close(fd)
        except OSError as e:
            raise PublishError(
                f"Output directory is not writable: {self.output_dir}",
                PublishFailure.NOT_WRITABLE,
                destination=str(destination),
                details={"error": str(e)},
            ) from e

        tmp_path = Path(tmp_name)
        try:
            shutil.copy2(artifact.path, tmp_path)
            os.replace(tmp_path, destination)
        except OSError as e:
            raise PublishError(
                f"Failed to copy {artifact.name} to {self.output_dir}",
                PublishFailure.COPY_FAILED,
                destination=str(destination),
                details={"error": str(e)},
            ) from e
        finally:
            tmp_path.unlink(missing_ok=True)

        logger.info(f"Published {artifact.name} to {destination}")
        return PublishedFile(
            path=destination,
            source=artifact.path,
            size=destination.stat().st_size,
        )
