"""Build system detection and execution.

This module provides:
- Build system detection (Maven, Gradle)
- Execution of the build tool's "clean build, skip tests" command
"""

from monteur.pipeline.build.detector import (
    BuildSystemDetector,
    detect_build_system,
)
from monteur.pipeline.build.executor import (
    BuildExecutor,
    raise_for_outcome,
)

__all__ = [
    "BuildSystemDetector",
    "detect_build_system",
    "BuildExecutor",
    "raise_for_outcome",
]
