"""Data models module."""

from monteur.models.build import (
    ArtifactCandidate,
    BuildCommand,
    BuildOutcome,
    BuildRequest,
    BuildVariant,
    PublishedFile,
)
from monteur.models.pipeline import PipelineResult, PipelineState
from monteur.models.workspace import WorkspaceInfo, WorkspaceStatus

__all__ = [
    "ArtifactCandidate",
    "BuildCommand",
    "BuildOutcome",
    "BuildRequest",
    "BuildVariant",
    "PublishedFile",
    "PipelineResult",
    "PipelineState",
    "WorkspaceInfo",
    "WorkspaceStatus",
]
