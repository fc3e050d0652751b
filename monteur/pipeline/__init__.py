"""Build pipeline - fetch, extract, detect, build, select and publish."""

from monteur.pipeline.artifacts import ArtifactSelector, SelectionPolicy
from monteur.pipeline.build import BuildExecutor, BuildSystemDetector, detect_build_system
from monteur.pipeline.extractor import ArchiveExtractor
from monteur.pipeline.fetcher import ArchiveFetcher
from monteur.pipeline.orchestrator import BuildPipeline
from monteur.pipeline.publisher import Publisher
from monteur.pipeline.workspace import WorkspaceManager

__all__ = [
    "ArchiveFetcher",
    "ArchiveExtractor",
    "BuildSystemDetector",
    "detect_build_system",
    "BuildExecutor",
    "ArtifactSelector",
    "SelectionPolicy",
    "Publisher",
    "BuildPipeline",
    "WorkspaceManager",
]
