"""Pytest configuration and shared fixtures."""

import io
import os
import shutil
import stat
import tarfile
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from monteur.core.config.settings import (
    BuildSettings,
    FetcherSettings,
    LoggingSettings,
    OutputSettings,
    SelectionSettings,
    Settings,
    WorkspaceSettings,
)
from monteur.pipeline.workspace import WorkspaceManager

# path -> file content (str/bytes), or None for a directory
ArchiveLayout = dict[str, str | bytes | None]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory that is cleaned up after the test.

    Yields:
        Path to the temporary directory.
    """
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def workspace_settings(temp_dir: Path) -> WorkspaceSettings:
    """Create workspace settings for testing."""
    return WorkspaceSettings(base_dir=temp_dir / "workspaces", prefix="test_")


@pytest.fixture
def workspace_manager(workspace_settings: WorkspaceSettings) -> WorkspaceManager:
    """Create a workspace manager for testing."""
    return WorkspaceManager(workspace_settings)


@pytest.fixture
def settings(temp_dir: Path) -> Settings:
    """Create settings isolated from the environment's config file."""
    return Settings(
        workspace=WorkspaceSettings(base_dir=temp_dir / "workspaces", prefix="test_"),
        fetcher=FetcherSettings(),
        build=BuildSettings(maven_executable="mvn", gradle_executable="gradle"),
        selection=SelectionSettings(),
        output=OutputSettings(dir=temp_dir / "output"),
        logging=LoggingSettings(use_rich=False),
    )


def write_archive(
    path: Path,
    layout: ArchiveLayout,
    modes: dict[str, int] | None = None,
) -> Path:
    """Write a tar.gz archive with the given layout.

    Args:
        path: Archive file to create.
        layout: Mapping of member name to content (None for directories).
        modes: Optional permission bits per member name.

    Returns:
        The archive path.
    """
    modes = modes or {}
    with tarfile.open(path, "w:gz") as tar:
        for name, content in layout.items():
            info = tarfile.TarInfo(name)
            if content is None:
                info.type = tarfile.DIRTYPE
                info.mode = modes.get(name, 0o755)
                tar.addfile(info)
                continue
            data = content.encode() if isinstance(content, str) else content
            info.size = len(data)
            info.mode = modes.get(name, 0o644)
            tar.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture
def make_archive(temp_dir: Path) -> Callable[..., Path]:
    """Return a factory writing tar.gz archives into the temp directory."""
    counter = iter(range(1000))

    def factory(layout: ArchiveLayout, modes: dict[str, int] | None = None) -> Path:
        archives = temp_dir / "archives"
        archives.mkdir(exist_ok=True)
        return write_archive(archives / f"archive{next(counter)}.tar.gz", layout, modes)

    return factory


def write_script(path: Path, body: str) -> Path:
    """Write an executable shell script."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_bin(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a directory prepended to PATH for fake build tools."""
    bin_dir = temp_dir / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return bin_dir


@pytest.fixture
def fake_tool(fake_bin: Path) -> Callable[[str, str], Path]:
    """Return a factory installing a fake executable on PATH."""

    def factory(name: str, body: str) -> Path:
        return write_script(fake_bin / name, body)

    return factory


@pytest.fixture
def script() -> Callable[[Path, str], Path]:
    """Return a helper writing an executable shell script at a given path."""
    return write_script
