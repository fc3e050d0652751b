"""Exception definitions module."""

from monteur.core.exceptions.errors import (
    BuildError,
    BuildFailure,
    ConfigurationError,
    DetectionError,
    ExtractError,
    ExtractFailure,
    FetchError,
    FetchFailure,
    MonteurError,
    PublishError,
    PublishFailure,
    SelectionError,
    SelectionFailure,
    StageError,
    WorkspaceError,
)

__all__ = [
    "MonteurError",
    "StageError",
    "FetchError",
    "FetchFailure",
    "ExtractError",
    "ExtractFailure",
    "DetectionError",
    "BuildError",
    "BuildFailure",
    "SelectionError",
    "SelectionFailure",
    "PublishError",
    "PublishFailure",
    "ConfigurationError",
    "WorkspaceError",
]
