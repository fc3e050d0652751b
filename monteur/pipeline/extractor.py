"""Archive extraction into a workspace."""

import gzip
import posixpath
import tarfile
import zlib
from pathlib import Path, PurePosixPath

from monteur.core.exceptions.errors import ExtractError, ExtractFailure
from monteur.core.logger.logger import get_logger

logger = get_logger(__name__)

# Errors raised by tarfile/gzip/zlib when the archive bytes are unreadable.
# gzip.BadGzipFile is an OSError subclass, so this group is checked first.
CORRUPT_ARCHIVE_ERRORS = (tarfile.TarError, gzip.BadGzipFile, zlib.error, EOFError)


class ArchiveExtractor:
    """Unpacks a tar+gzip archive into a fresh directory.

    Every member is validated before anything is written. When the archive
    wraps all of its content in a single top-level directory, that
    directory becomes the extraction root.
    """

    def extract(self, archive_path: Path, destination: Path) -> Path:
        """Extract ``archive_path`` so that ``destination`` holds the project.

        Args:
            archive_path: Path to the tar+gzip archive.
            destination: Directory to create; must not exist yet.

        Returns:
            The populated destination directory.

        Raises:
            ExtractError: If the archive is corrupt, unsafe or cannot be written.
        """
        staging = destination.with_name(destination.name + ".extract")
        logger.info(f"Extracting archive to: {destination}")

        try:
            with tarfile.open(archive_path, "r:gz") as tar:
                members = tar.getmembers()
                if not members:
                    raise ExtractError("Archive contains no entries", ExtractFailure.EMPTY)
                for member in members:
                    self._validate_member(member)
                staging.mkdir(parents=True)
                tar.extractall(staging, members=members, filter="data")
        except tarfile.FilterError as e:
            raise ExtractError(
                f"Archive entry escapes the extraction directory: {e}",
                ExtractFailure.TRAVERSAL,
            ) from e
        except CORRUPT_ARCHIVE_ERRORS as e:
            raise ExtractError(
                f"Failed to read archive: {e}",
                ExtractFailure.CORRUPT,
                details={"archive": str(archive_path)},
            ) from e
        except OSError as e:
            raise ExtractError(
                f"Failed to write extracted files: {e}",
                ExtractFailure.WRITE,
                details={"destination": str(staging)},
            ) from e

        return self._normalize(staging, destination)

    def _validate_member(self, member: tarfile.TarInfo) -> None:
        """Reject members that are unsafe or of an unsupported type."""
        name = member.name
        if self._escapes(name):
            raise ExtractError(
                "Archive entry points outside the extraction directory",
                ExtractFailure.TRAVERSAL,
                entry=name,
            )

        if member.issym():
            target = posixpath.join(posixpath.dirname(name), member.linkname)
            if PurePosixPath(member.linkname).is_absolute() or self._escapes(target):
                raise ExtractError(
                    f"Symbolic link target leaves the archive: {member.linkname}",
                    ExtractFailure.TRAVERSAL,
                    entry=name,
                )
        elif member.islnk():
            if self._escapes(member.linkname):
                raise ExtractError(
                    f"Hard link target leaves the archive: {member.linkname}",
                    ExtractFailure.TRAVERSAL,
                    entry=name,
                )
        elif not (member.isfile() or member.isdir()):
            raise ExtractError(
                "Unsupported archive entry type (device or FIFO)",
                ExtractFailure.UNSUPPORTED_ENTRY,
                entry=name,
                details={"type": member.type.decode("ascii", errors="replace")},
            )

    @staticmethod
    def _escapes(name: str) -> bool:
        """Whether an archive path is absolute or climbs above the root."""
        if PurePosixPath(name).is_absolute() or name.startswith("\\"):
            return True
        normalized = posixpath.normpath(name)
        return normalized == ".." or normalized.startswith("../")

    def _normalize(self, staging: Path, destination: Path) -> Path:
        """Promote a single wrapping directory, then move staging into place."""
        try:
            entries = list(staging.iterdir())
            if len(entries) == 1 and entries[0].is_dir() and not entries[0].is_symlink():
                wrapper = entries[0]
                logger.debug(f"Moving contents from subfolder: {wrapper.name}")
                wrapper.rename(destination)
                staging.rmdir()
            else:
                staging.rename(destination)
        except OSError as e:
            raise ExtractError(
                f"Failed to arrange extracted files: {e}",
                ExtractFailure.WRITE,
                details={"destination": str(destination)},
            ) from e

        if not any(destination.iterdir()):
            raise ExtractError("Archive contains no files", ExtractFailure.EMPTY)

        logger.info("Archive successfully extracted")
        return destination
