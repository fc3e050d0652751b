"""Custom exception definitions for Monteur.

Every pipeline stage fails with its own exception class. Each carries the
name of the stage it was raised from, a ``reason`` drawn from a closed
per-stage enumeration and the process exit code the CLI reports for it.
"""

from enum import Enum
from typing import Any


class MonteurError(Exception):
    """Base exception for all Monteur errors."""

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class FetchFailure(str, Enum):
    """Reasons an archive download can fail."""

    CONNECTION = "connection"
    STATUS = "status"
    TRUNCATED = "truncated"
    WRITE = "write"


class ExtractFailure(str, Enum):
    """Reasons archive extraction can fail."""

    CORRUPT = "corrupt"
    TRAVERSAL = "traversal"
    UNSUPPORTED_ENTRY = "unsupported_entry"
    EMPTY = "empty"
    WRITE = "write"


class BuildFailure(str, Enum):
    """Reasons a build can fail."""

    TOOL_NOT_FOUND = "tool_not_found"
    NOT_EXECUTABLE = "not_executable"
    START_FAILED = "start_failed"
    NON_ZERO_EXIT = "non_zero_exit"
    SIGNALLED = "signalled"


class SelectionFailure(str, Enum):
    """Reasons artifact selection can fail."""

    NO_OUTPUT_LOCATION = "no_output_location"
    NO_CANDIDATES = "no_candidates"
    AMBIGUOUS = "ambiguous"


class PublishFailure(str, Enum):
    """Reasons publishing can fail."""

    NOT_WRITABLE = "not_writable"
    COPY_FAILED = "copy_failed"


class StageError(MonteurError):
    """Base class for errors raised by a pipeline stage."""

    stage: str = "unknown"

    def __init__(
        self,
        message: str,
        reason: Enum | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize stage error.

        Args:
            message: Error message.
            reason: Failure reason from the stage's enumeration.
            details: Additional error details.
        """
        details = details or {}
        if reason is not None:
            details["reason"] = reason.value
        super().__init__(message, details)
        self.reason = reason


class FetchError(StageError):
    """Exception raised when the archive cannot be downloaded."""

    stage = "fetching"
    exit_code = 10

    def __init__(
        self,
        message: str,
        reason: FetchFailure,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize fetch error.

        Args:
            message: Error message.
            reason: Why the download failed.
            url: URL being downloaded.
            details: Additional error details.
        """
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, reason, details)


class ExtractError(StageError):
    """Exception raised when the archive cannot be unpacked."""

    stage = "extracting"
    exit_code = 11

    def __init__(
        self,
        message: str,
        reason: ExtractFailure,
        entry: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize extract error.

        Args:
            message: Error message.
            reason: Why extraction failed.
            entry: Archive member involved, if any.
            details: Additional error details.
        """
        details = details or {}
        if entry:
            details["entry"] = entry
        super().__init__(message, reason, details)


class DetectionError(StageError):
    """Exception raised when no build system marker is found."""

    stage = "detecting"
    exit_code = 12

    def __init__(
        self,
        message: str,
        project_root: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if project_root:
            details["project_root"] = project_root
        super().__init__(message, None, details)


class BuildError(StageError):
    """Exception raised when the build tool cannot run or fails."""

    stage = "building"
    exit_code = 13

    def __init__(
        self,
        message: str,
        reason: BuildFailure,
        command: list[str] | None = None,
        return_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize build error.

        Args:
            message: Error message.
            reason: Why the build failed.
            command: Command line that was (or would have been) executed.
            return_code: Exit status of the build process.
            details: Additional error details.
        """
        details = details or {}
        if command:
            details["command"] = " ".join(command)
        if return_code is not None:
            details["return_code"] = return_code
        super().__init__(message, reason, details)


class SelectionError(StageError):
    """Exception raised when no unambiguous artifact can be chosen."""

    stage = "selecting"
    exit_code = 14

    def __init__(
        self,
        message: str,
        reason: SelectionFailure,
        candidates: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if candidates:
            details["candidates"] = candidates
        super().__init__(message, reason, details)


class PublishError(StageError):
    """Exception raised when the artifact cannot be delivered."""

    stage = "publishing"
    exit_code = 15

    def __init__(
        self,
        message: str,
        reason: PublishFailure,
        destination: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if destination:
            details["destination"] = destination
        super().__init__(message, reason, details)


class WorkspaceError(MonteurError):
    """Exception raised for workspace management errors."""

    def __init__(
        self,
        message: str,
        workspace_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize workspace error.

        Args:
            message: Error message.
            workspace_path: Path to the workspace.
            details: Additional error details.
        """
        details = details or {}
        if workspace_path:
            details["workspace_path"] = workspace_path
        super().__init__(message, details)


class ConfigurationError(MonteurError):
    """Exception raised for configuration errors."""

    exit_code = 2

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error message.
            config_key: Configuration key that caused the error.
            details: Additional error details.
        """
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)
