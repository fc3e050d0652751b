"""Configuration management for Monteur."""

from monteur.core.config.loader import ConfigLoader
from monteur.core.config.settings import (
    BuildSettings,
    FetcherSettings,
    LoggingSettings,
    OutputSettings,
    SelectionSettings,
    Settings,
    WorkspaceSettings,
    get_settings,
)

__all__ = [
    "ConfigLoader",
    "Settings",
    "WorkspaceSettings",
    "FetcherSettings",
    "BuildSettings",
    "SelectionSettings",
    "OutputSettings",
    "LoggingSettings",
    "get_settings",
]
