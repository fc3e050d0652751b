"""Pipeline orchestrator - runs one build from archive URL to published artifact.

States::

    IDLE -> FETCHING -> EXTRACTING -> DETECTING -> BUILDING
         -> SELECTING -> PUBLISHING -> DONE

Any non-terminal state may move to FAILED. Both terminal states remove the
run's workspace (downloaded archive and extracted tree). Nothing is retried.
"""

from monteur.core.config.settings import Settings, get_settings
from monteur.core.exceptions.errors import FetchError, FetchFailure, WorkspaceError
from monteur.core.logger.logger import get_logger
from monteur.models.build import BuildRequest
from monteur.models.pipeline import PipelineResult, PipelineState
from monteur.models.workspace import WorkspaceInfo
from monteur.pipeline.artifacts import ArtifactSelector
from monteur.pipeline.build.detector import BuildSystemDetector
from monteur.pipeline.build.executor import BuildExecutor, raise_for_outcome
from monteur.pipeline.extractor import ArchiveExtractor
from monteur.pipeline.fetcher import ArchiveFetcher
from monteur.pipeline.publisher import Publisher
from monteur.pipeline.workspace import WorkspaceManager

logger = get_logger(__name__)


class BuildPipeline:
    """Sequences the pipeline stages over a single workspace."""

    def __init__(
        self,
        settings: Settings | None = None,
        workspace_manager: WorkspaceManager | None = None,
        fetcher: ArchiveFetcher | None = None,
        extractor: ArchiveExtractor | None = None,
        detector: BuildSystemDetector | None = None,
        executor: BuildExecutor | None = None,
        selector: ArtifactSelector | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            settings: Application settings. Uses global settings if not provided.
            workspace_manager: Owner of the run's working directory.
            fetcher: Archive fetcher.
            extractor: Archive extractor.
            detector: Build system detector.
            executor: Build executor.
            selector: Artifact selector.
        """
        settings = settings or get_settings()

        self.workspace_manager = workspace_manager or WorkspaceManager(settings.workspace)
        self.fetcher = fetcher or ArchiveFetcher(settings.fetcher)
        self.extractor = extractor or ArchiveExtractor()
        self.detector = detector or BuildSystemDetector()
        self.executor = executor or BuildExecutor(settings.build)
        self.selector = selector or ArtifactSelector(settings=settings.selection)
        self.last_result: PipelineResult | None = None

    async def run(self, request: BuildRequest) -> PipelineResult:
        """Run the pipeline for ``request``.

        Args:
            request: Archive URL and output directory.

        Returns:
            PipelineResult in the DONE state.

        Raises:
            StageError: The error of the failing stage, unmodified.
        """
        result = PipelineResult(request=request, history=[PipelineState.IDLE])
        self.last_result = result
        self._transition(result, PipelineState.FETCHING)

        try:
            with self.workspace_manager.workspace(request.source_url) as workspace:
                await self._run_stages(result, workspace)
        except WorkspaceError as e:
            error = FetchError(
                f"Cannot create a working directory for the download: {e.message}",
                FetchFailure.WRITE,
                url=request.source_url,
            )
            self._fail(result, error)
            raise error from e

        return result

    async def _run_stages(self, result: PipelineResult, workspace: WorkspaceInfo) -> None:
        """Run every stage inside the workspace scope."""
        request = result.request

        try:
            archive = await self.fetcher.fetch(request.source_url, workspace.archive_path)

            self._transition(result, PipelineState.EXTRACTING)
            tree = self.extractor.extract(archive, workspace.tree_path)

            self._transition(result, PipelineState.DETECTING)
            result.variant = self.detector.detect(tree)

            self._transition(result, PipelineState.BUILDING)
            result.outcome = await self.executor.execute(result.variant, tree)
            raise_for_outcome(result.outcome)

            self._transition(result, PipelineState.SELECTING)
            result.artifact = self.selector.find(tree, result.variant)

            self._transition(result, PipelineState.PUBLISHING)
            result.published = Publisher(request.output_dir).publish(result.artifact)

            self._transition(result, PipelineState.DONE)
        except BaseException as e:
            self._fail(result, e)
            raise

    @staticmethod
    def _transition(result: PipelineResult, state: PipelineState) -> None:
        """Move to ``state`` and record it."""
        result.state = state
        result.history.append(state)
        logger.info(f"Pipeline state: {state.value}")

    @staticmethod
    def _fail(result: PipelineResult, error: BaseException) -> None:
        """Move to FAILED, remembering where the run stopped."""
        if result.state.is_terminal:
            return
        result.failed_stage = result.state
        result.error_message = str(error) or type(error).__name__
        result.state = PipelineState.FAILED
        result.history.append(PipelineState.FAILED)
        logger.error(f"Pipeline failed while {result.failed_stage.value}: {result.error_message}")
