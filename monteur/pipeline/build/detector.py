"""Build system detection for extracted Java projects.

Only the project root is inspected. A Maven descriptor wins over Gradle
files; nested modules never influence the result.
"""

from pathlib import Path

from monteur.core.exceptions.errors import DetectionError
from monteur.core.logger.logger import get_logger
from monteur.models.build import BuildVariant

logger = get_logger(__name__)

# pom.xml plus the polyglot Maven descriptor formats
MAVEN_DESCRIPTORS = (
    "pom.xml",
    "pom.atom",
    "pom.clj",
    "pom.groovy",
    "pom.rb",
    "pom.scala",
    "pom.yaml",
    "pom.yml",
)

GRADLE_BUILD_SCRIPTS = ("build.gradle", "build.gradle.kts")
GRADLE_WRAPPER = "gradlew"
GRADLE_MARKERS = (*GRADLE_BUILD_SCRIPTS, GRADLE_WRAPPER)

# Checked in order; the first variant with a marker at the root wins.
DETECTION_ORDER: tuple[tuple[BuildVariant, tuple[str, ...]], ...] = (
    (BuildVariant.MAVEN, MAVEN_DESCRIPTORS),
    (BuildVariant.GRADLE, GRADLE_MARKERS),
)


class BuildSystemDetector:
    """Classifies a project root as Maven or Gradle."""

    def find_markers(self, source_path: Path, variant: BuildVariant) -> list[str]:
        """Return the marker files of ``variant`` present at the root."""
        for candidate, markers in DETECTION_ORDER:
            if candidate == variant:
                return [m for m in markers if (source_path / m).is_file()]
        return []

    def detect(self, source_path: Path) -> BuildVariant:
        """Detect the build system of a project.

        Args:
            source_path: Root of the extracted project.

        Returns:
            The detected build variant.

        Raises:
            DetectionError: If no marker file is present at the root.
        """
        for variant, _ in DETECTION_ORDER:
            markers = self.find_markers(source_path, variant)
            if markers:
                logger.info(f"Using {variant.value.capitalize()} (found {', '.join(markers)})")
                return variant

        raise DetectionError(
            "No build system detected. Make sure your project contains a "
            "pom.xml/pom.groovy/... or a build.gradle/build.gradle.kts/gradlew file "
            "at its root. If you're using Gradle without a wrapper, run "
            "'gradle wrapper' to generate one.",
            project_root=str(source_path),
        )


def detect_build_system(source_path: Path) -> BuildVariant:
    """Convenience function to detect the build system.

    Args:
        source_path: Root of the extracted project.

    Returns:
        The detected build variant.
    """
    return BuildSystemDetector().detect(source_path)
