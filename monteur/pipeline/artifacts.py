"""Artifact discovery and selection.

After a build, every module's conventional output folder is scanned for
packaged artifacts (Maven: ``<module>/target``, Gradle:
``<module>/build/libs``). Exactly one candidate is then chosen:

1. Only files with an artifact extension (``.jar`` by default) are candidates.
2. Auxiliary artifacts (``-sources``, ``-javadoc`` and similar classifiers)
   are dropped.
3. The tie-break rules run in their configured order until one candidate
   remains. The default order is:

   - ``unclassified``: keep the candidates without a classifier, if any.
   - ``newest``: keep the most recently modified candidates.
   - ``largest``: keep the largest candidates (a shaded jar over a thin one).

If nothing survives step 2, or several candidates survive every rule,
selection fails instead of guessing.
"""

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from monteur.core.config.settings import SelectionSettings, get_settings
from monteur.core.exceptions.errors import SelectionError, SelectionFailure
from monteur.core.logger.logger import get_logger
from monteur.models.build import ArtifactCandidate, BuildVariant
from monteur.pipeline.build.detector import GRADLE_BUILD_SCRIPTS, MAVEN_DESCRIPTORS

logger = get_logger(__name__)

OUTPUT_LOCATIONS: dict[BuildVariant, tuple[str, ...]] = {
    BuildVariant.MAVEN: ("target",),
    BuildVariant.GRADLE: ("build", "libs"),
}

MODULE_DESCRIPTORS: dict[BuildVariant, tuple[str, ...]] = {
    BuildVariant.MAVEN: MAVEN_DESCRIPTORS,
    BuildVariant.GRADLE: GRADLE_BUILD_SCRIPTS,
}

# Output folders and dependency caches, never searched for modules
SKIPPED_DIRECTORIES = frozenset({"target", "build", "node_modules"})

SHADE_ORIGINAL_PREFIX = "original-"


@dataclass
class SelectionPolicy:
    """Rules deciding which build output is the deployable artifact.

    Classifiers are recognised by name only. A suffix that is neither
    excluded nor known, such as ``linux`` in ``app-1.0-linux.jar``, cannot
    be told apart from a version qualifier, so that jar counts as
    unclassified. Listing the name in ``selection.known_classifiers`` makes
    it a classifier.
    """

    extensions: tuple[str, ...] = (".jar",)
    excluded_classifiers: frozenset[str] = frozenset({"sources", "javadoc"})
    known_classifiers: frozenset[str] = frozenset()
    tie_breakers: tuple[str, ...] = ("unclassified", "newest", "largest")
    _suffixes: tuple[str, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        # Longest first so "test-sources" is matched before "sources".
        classifiers = self.excluded_classifiers | self.known_classifiers
        self._suffixes = tuple(sorted(classifiers, key=lambda c: (-len(c), c)))

    @classmethod
    def from_settings(cls, settings: SelectionSettings) -> "SelectionPolicy":
        """Build a policy from selection settings."""
        return cls(
            extensions=tuple(settings.extensions),
            excluded_classifiers=frozenset(settings.excluded_classifiers),
            known_classifiers=frozenset(settings.known_classifiers),
            tie_breakers=tuple(settings.tie_breakers),
        )

    def is_artifact(self, path: Path) -> bool:
        """Whether ``path`` has a packaged-artifact extension."""
        return path.suffix.lower() in self.extensions

    def classify(self, file_name: str) -> str | None:
        """Infer the classifier of an artifact file name.

        Args:
            file_name: Name such as ``app-1.0-sources.jar``.

        Returns:
            The classifier, or None for a plain artifact.
        """
        stem = file_name.rsplit(".", 1)[0].lower()
        for classifier in self._suffixes:
            if stem.endswith(f"-{classifier}") and len(stem) > len(classifier) + 1:
                return classifier
        if stem.startswith(SHADE_ORIGINAL_PREFIX):
            return "original"
        return None

    def is_excluded(self, candidate: ArtifactCandidate) -> bool:
        """Whether a candidate is an auxiliary artifact."""
        return candidate.classifier in self.excluded_classifiers


def _prefer_unclassified(candidates: list[ArtifactCandidate]) -> list[ArtifactCandidate]:
    plain = [c for c in candidates if c.classifier is None]
    return plain or candidates


def _prefer_newest(candidates: list[ArtifactCandidate]) -> list[ArtifactCandidate]:
    newest = max(c.modified_ns for c in candidates)
    return [c for c in candidates if c.modified_ns == newest]


def _prefer_largest(candidates: list[ArtifactCandidate]) -> list[ArtifactCandidate]:
    largest = max(c.size for c in candidates)
    return [c for c in candidates if c.size == largest]


TIE_BREAK_RULES: dict[str, Callable[[list[ArtifactCandidate]], list[ArtifactCandidate]]] = {
    "unclassified": _prefer_unclassified,
    "newest": _prefer_newest,
    "largest": _prefer_largest,
}


class ArtifactSelector:
    """Finds build outputs and picks the single deployable artifact."""

    def __init__(
        self,
        policy: SelectionPolicy | None = None,
        settings: SelectionSettings | None = None,
    ) -> None:
        """Initialize the artifact selector.

        Args:
            policy: Selection policy. Built from settings if not provided.
            settings: Selection settings. Uses global settings if not provided.
        """
        if policy is None:
            policy = SelectionPolicy.from_settings(settings or get_settings().selection)
        self.policy = policy

    def discover_modules(self, source_path: Path, variant: BuildVariant) -> list[Path]:
        """Return the root and every nested module directory of the project.

        A nested module is a directory holding a descriptor of ``variant``.
        Gradle subprojects configured from the root build script have no
        descriptor of their own, so for Gradle any directory that holds a
        ``build/libs`` folder is a module as well. Output folders, hidden
        directories and ``node_modules`` are not searched.
        """
        descriptors = MODULE_DESCRIPTORS[variant]
        output_location = OUTPUT_LOCATIONS[variant]
        modules = [source_path]

        for dirpath, dirnames, _ in os.walk(source_path):
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith(".") and d not in SKIPPED_DIRECTORIES
            )
            current = Path(dirpath)
            if current == source_path:
                continue
            if any((current / d).is_file() for d in descriptors):
                modules.append(current)
            elif variant == BuildVariant.GRADLE and current.joinpath(*output_location).is_dir():
                modules.append(current)

        return modules

    def output_directories(self, source_path: Path, variant: BuildVariant) -> list[Path]:
        """Return the existing output folders of all modules.

        Raises:
            SelectionError: If no module has an output folder.
        """
        location = OUTPUT_LOCATIONS[variant]
        directories = [
            module.joinpath(*location)
            for module in self.discover_modules(source_path, variant)
            if module.joinpath(*location).is_dir()
        ]

        if not directories:
            raise SelectionError(
                f"Build output location not found: {'/'.join(location)}",
                SelectionFailure.NO_OUTPUT_LOCATION,
                details={"project_root": str(source_path)},
            )
        return directories

    def enumerate_candidates(
        self, source_path: Path, variant: BuildVariant
    ) -> list[ArtifactCandidate]:
        """List the artifact files in every module output folder.

        Returns:
            Candidates sorted by their path relative to the project root.
        """
        candidates = []
        for directory in self.output_directories(source_path, variant):
            module = directory.parent
            if variant == BuildVariant.GRADLE:
                module = module.parent
            module_name = module.relative_to(source_path).as_posix()

            for path in sorted(directory.iterdir()):
                if not path.is_file() or not self.policy.is_artifact(path):
                    continue
                stat = path.stat()
                candidates.append(
                    ArtifactCandidate(
                        path=path.resolve(),
                        size=stat.st_size,
                        modified_ns=stat.st_mtime_ns,
                        classifier=self.policy.classify(path.name),
                        module=module_name,
                    )
                )

        candidates.sort(key=lambda c: c.path.as_posix())
        logger.debug(f"Found {len(candidates)} candidate artifact(s)")
        return candidates

    def select(self, candidates: list[ArtifactCandidate]) -> ArtifactCandidate:
        """Choose exactly one artifact from ``candidates``.

        The result depends only on the candidates' attributes, never on
        the order they are given in.

        Raises:
            SelectionError: If no candidate qualifies or the choice is ambiguous.
        """
        remaining = sorted(
            (c for c in candidates if not self.policy.is_excluded(c)),
            key=lambda c: c.path.as_posix(),
        )

        if not remaining:
            raise SelectionError(
                "No deployable artifact found among build outputs",
                SelectionFailure.NO_CANDIDATES,
                candidates=[c.name for c in candidates],
            )

        for rule in self.policy.tie_breakers:
            if len(remaining) == 1:
                break
            remaining = TIE_BREAK_RULES[rule](remaining)
            logger.debug(f"After '{rule}': {[c.name for c in remaining]}")

        if len(remaining) > 1:
            raise SelectionError(
                "No unambiguous artifact: several candidates remain after all tie-breaks",
                SelectionFailure.AMBIGUOUS,
                candidates=[str(Path(c.module) / c.name) for c in remaining],
            )

        chosen = remaining[0]
        logger.info(f"Selected artifact: {chosen.name} (module {chosen.module})")
        return chosen

    def find(self, source_path: Path, variant: BuildVariant) -> ArtifactCandidate:
        """Enumerate candidates under ``source_path`` and select one."""
        return self.select(self.enumerate_candidates(source_path, variant))
