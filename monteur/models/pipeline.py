"""Pipeline state models."""

from enum import Enum

from pydantic import BaseModel, Field

from monteur.models.build import (
    ArtifactCandidate,
    BuildOutcome,
    BuildRequest,
    BuildVariant,
    PublishedFile,
)


class PipelineState(str, Enum):
    """States of a pipeline run."""

    IDLE = "idle"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    DETECTING = "detecting"
    BUILDING = "building"
    SELECTING = "selecting"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is possible."""
        return self in (PipelineState.DONE, PipelineState.FAILED)


class PipelineResult(BaseModel):
    """Record of a completed pipeline run."""

    request: BuildRequest
    state: PipelineState = PipelineState.IDLE
    history: list[PipelineState] = Field(default_factory=list)
    variant: BuildVariant | None = None
    outcome: BuildOutcome | None = None
    artifact: ArtifactCandidate | None = None
    published: PublishedFile | None = None
    failed_stage: PipelineState | None = None
    error_message: str | None = None

    @property
    def success(self) -> bool:
        """Whether the artifact was published."""
        return self.state == PipelineState.DONE
