"""Build executor for running the build tool against an extracted project."""

import asyncio
import os
import shutil
import time
from collections import deque
from pathlib import Path

from monteur.core.config.settings import BuildSettings, get_settings
from monteur.core.exceptions.errors import BuildError, BuildFailure
from monteur.core.logger.logger import BUILD_OUTPUT_LOGGER, get_logger
from monteur.models.build import BuildCommand, BuildOutcome, BuildVariant
from monteur.pipeline.build.detector import GRADLE_WRAPPER

logger = get_logger(__name__)
build_output_logger = get_logger(BUILD_OUTPUT_LOGGER)

# Arguments of the "clean build, skip tests" command of each build system
BUILD_ARGUMENTS: dict[BuildVariant, tuple[str, ...]] = {
    BuildVariant.MAVEN: ("clean", "package", "-Dmaven.test.skip=true"),
    BuildVariant.GRADLE: ("clean", "build", "-x", "check", "-x", "test"),
}

OUTPUT_TAIL_LINES = 50
READ_CHUNK_SIZE = 64 * 1024
MAX_LINE_BYTES = 1024 * 1024


class BuildExecutor:
    """Runs the fixed build command of a build variant.

    The command is executed with the project root as working directory.
    Its combined stdout/stderr is streamed line by line to the
    ``monteur.build`` logger. No timeout is applied.
    """

    def __init__(self, settings: BuildSettings | None = None) -> None:
        """Initialize the build executor.

        Args:
            settings: Build settings. Uses global settings if not provided.
        """
        self.settings = settings or get_settings().build

    def resolve_command(self, variant: BuildVariant, source_path: Path) -> BuildCommand:
        """Resolve the build command for ``variant``.

        Maven is looked up on PATH. Gradle uses the project's own wrapper
        when it ships one and falls back to a PATH-resolved ``gradle``.

        Raises:
            BuildError: If the tool cannot be found or is not executable.
        """
        if variant == BuildVariant.MAVEN:
            executable = self._which(self.settings.maven_executable)
        elif variant == BuildVariant.GRADLE:
            wrapper = source_path / GRADLE_WRAPPER
            if wrapper.is_file():
                if not os.access(wrapper, os.X_OK):
                    raise BuildError(
                        f"Gradle wrapper is not executable: {wrapper}",
                        BuildFailure.NOT_EXECUTABLE,
                        command=[str(wrapper)],
                    )
                executable = str(wrapper)
            else:
                executable = self._which(self.settings.gradle_executable)
        else:
            raise ValueError(f"Unsupported build variant: {variant}")

        return BuildCommand(
            variant=variant,
            argv=[executable, *BUILD_ARGUMENTS[variant]],
            env_vars=dict(self.settings.env),
        )

    @staticmethod
    def _which(name: str) -> str:
        """Resolve an executable from PATH."""
        resolved = shutil.which(name)
        if resolved is None:
            raise BuildError(
                f"Build tool not found on PATH: {name}",
                BuildFailure.TOOL_NOT_FOUND,
                command=[name],
            )
        return resolved

    async def execute(self, variant: BuildVariant, source_path: Path) -> BuildOutcome:
        """Run the build for ``variant`` in ``source_path``.

        Args:
            variant: Detected build system.
            source_path: Root of the extracted project.

        Returns:
            BuildOutcome of the finished process, successful or not.

        Raises:
            BuildError: If the build tool cannot be started.
        """
        command = self.resolve_command(variant, source_path)
        env = os.environ.copy()
        env.update(command.env_vars)

        if variant == BuildVariant.MAVEN and self.settings.log_tool_version:
            version = await self._run(
                [command.argv[0], "--version"], source_path, env, stream=False
            )
            if version.success:
                logger.info("Maven version: " + " | ".join(version.output_tail[:3]))
            else:
                logger.warning(f"'{command.argv[0]} --version' exited with {version.return_code}")

        logger.info(f"Building project: {command}")
        outcome = await self._run(command.argv, source_path, env, stream=True)

        if outcome.success:
            logger.info(f"Build completed successfully in {outcome.duration_seconds:.1f}s")
        elif outcome.signal is not None:
            logger.error(f"Build terminated by signal {outcome.signal}")
        else:
            logger.error(f"Build failed with code {outcome.return_code}")

        return outcome

    async def _run(
        self,
        argv: list[str],
        cwd: Path,
        env: dict[str, str],
        stream: bool,
    ) -> BuildOutcome:
        """Run a command, collecting (and optionally logging) its output."""
        start_time = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                stdin=asyncio.subprocess.DEVNULL,
                cwd=cwd,
                env=env,
            )
        except FileNotFoundError as e:
            raise BuildError(
                f"Build tool not found: {argv[0]}",
                BuildFailure.TOOL_NOT_FOUND,
                command=argv,
            ) from e
        except PermissionError as e:
            raise BuildError(
                f"Build tool is not executable: {argv[0]}",
                BuildFailure.NOT_EXECUTABLE,
                command=argv,
            ) from e
        except OSError as e:
            raise BuildError(
                f"Failed to start build: {e}",
                BuildFailure.START_FAILED,
                command=argv,
            ) from e

        tail: deque[str] = deque(maxlen=OUTPUT_TAIL_LINES)

        def record(raw: bytes) -> None:
            line = raw.decode("utf-8", errors="replace").rstrip()
            tail.append(line)
            if stream:
                build_output_logger.info(line)

        try:
            pending = b""
            while True:
                chunk = await process.stdout.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                *lines, pending = (pending + chunk).split(b"\n")
                for raw in lines:
                    record(raw)
                # A line without a newline in sight is relayed in pieces.
                if len(pending) >= MAX_LINE_BYTES:
                    record(pending)
                    pending = b""
            if pending:
                record(pending)
            return_code = await process.wait()
        except BaseException:
            # Interrupted (cancellation or Ctrl+C): do not leave the tool running.
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        return BuildOutcome(
            success=return_code == 0,
            return_code=return_code,
            signal=-return_code if return_code < 0 else None,
            duration_seconds=time.monotonic() - start_time,
            command=list(argv),
            output_tail=list(tail),
        )


def raise_for_outcome(outcome: BuildOutcome) -> None:
    """Raise ``BuildError`` unless the build succeeded.

    Args:
        outcome: Outcome returned by ``BuildExecutor.execute``.

    Raises:
        BuildError: If the process exited non-zero or was killed by a signal.
    """
    if outcome.success:
        return

    if outcome.signal is not None:
        raise BuildError(
            f"Build terminated by signal {outcome.signal}",
            BuildFailure.SIGNALLED,
            command=outcome.command,
            return_code=outcome.return_code,
            details={"output_tail": outcome.output_tail[-10:]},
        )

    raise BuildError(
        f"Build failed with exit status {outcome.return_code}",
        BuildFailure.NON_ZERO_EXIT,
        command=outcome.command,
        return_code=outcome.return_code,
        details={"output_tail": outcome.output_tail[-10:]},
    )
