"""Project settings exports."""

from .loader import (
    DEFAULT_SETTINGS_LOCATION,
    ProjectSettingsError,
    default_network_prefix,
    load_project_settings,
)
from .settings_models import ImageSettings, ProjectSettings, ReadinessSettings
from .settings_scaffold_builder import (
    DEFAULT_SETTINGS_FILENAME,
    build_settings_scaffold,
    write_settings_scaffold,
)

__all__ = [
    "DEFAULT_SETTINGS_FILENAME",
    "DEFAULT_SETTINGS_LOCATION",
    "ImageSettings",
    "ProjectSettings",
    "ProjectSettingsError",
    "ReadinessSettings",
    "build_settings_scaffold",
    "default_network_prefix",
    "load_project_settings",
    "write_settings_scaffold",
]
