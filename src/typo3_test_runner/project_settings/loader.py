"""Project settings loader service."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from .settings_models import ImageSettings, ProjectSettings, ReadinessSettings

DEFAULT_SETTINGS_LOCATION = Path("Build") / "runTests.yaml"

_NETWORK_PREFIX_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_.-]*$")


class ProjectSettingsError(Exception):
    """Raised when the project settings file is invalid."""


def load_project_settings(
    settings_path: Path | str | None, *, project_root: Path
) -> ProjectSettings:
    """Load project settings, falling back to defaults when no file exists.

    An explicit path must exist. Without one, `Build/runTests.yaml` below the
    project root is used when present.
    """
    if settings_path is None:
        candidate = project_root / DEFAULT_SETTINGS_LOCATION
        if not candidate.exists():
            return ProjectSettings(network_prefix=default_network_prefix(project_root))
        path = candidate
    else:
        path = Path(settings_path)
        if not path.exists():
            raise ProjectSettingsError(f"Project settings file not found: {path}")

    try:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ProjectSettingsError(f"Failed to parse project settings file: {exc}") from exc

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise ProjectSettingsError("Project settings root must be a mapping.")

    return _parse_project_settings(parsed, project_root=project_root, source_path=path)


def default_network_prefix(project_root: Path) -> str:
    """Derive a network prefix from the project directory name."""
    slug = re.sub(r"[^a-z0-9]+", "-", project_root.resolve().name.lower()).strip("-")
    return slug or "typo3-extension"


def _parse_project_settings(
    section: Mapping[str, Any], *, project_root: Path, source_path: Path
) -> ProjectSettings:
    network_prefix = section.get("network_prefix")
    if network_prefix is None:
        network_prefix = default_network_prefix(project_root)
    else:
        network_prefix = _require_non_empty_string(network_prefix, "network_prefix")
        if not _NETWORK_PREFIX_PATTERN.match(network_prefix):
            raise ProjectSettingsError(
                "network_prefix may only contain lowercase letters, digits, '.', '_' and '-'."
            )

    return ProjectSettings(
        network_prefix=network_prefix,
        composer_root_version=_require_non_empty_string(
            section.get("composer_root_version", "1.x-dev"), "composer_root_version"
        ),
        e2e_base_url=_optional_string(section.get("e2e_base_url"), "e2e_base_url"),
        ci_workers=_require_positive_int(section.get("ci_workers", 4), "ci_workers"),
        mock_oauth=_require_bool(section.get("mock_oauth", False), "mock_oauth"),
        images=_parse_images(section.get("images")),
        readiness=_parse_readiness(section.get("readiness")),
        source_path=source_path,
    )


def _parse_images(value: Any) -> ImageSettings:
    if value is None:
        return ImageSettings()
    section = _require_mapping(value, "images")
    known = {item.name for item in fields(ImageSettings)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ProjectSettingsError(f"Unknown image setting(s): {', '.join(unknown)}")
    overrides = {
        key: _require_non_empty_string(raw, f"images.{key}") for key, raw in section.items()
    }
    return ImageSettings(**overrides)


def _parse_readiness(value: Any) -> ReadinessSettings:
    if value is None:
        return ReadinessSettings()
    section = _require_mapping(value, "readiness")
    defaults = ReadinessSettings()
    interval = section.get("interval_seconds", defaults.interval_seconds)
    if isinstance(interval, bool) or not isinstance(interval, int | float) or interval < 0:
        raise ProjectSettingsError("readiness.interval_seconds must be a non-negative number.")
    return ReadinessSettings(
        tcp_attempts=_require_positive_int(
            section.get("tcp_attempts", defaults.tcp_attempts), "readiness.tcp_attempts"
        ),
        http_attempts=_require_positive_int(
            section.get("http_attempts", defaults.http_attempts), "readiness.http_attempts"
        ),
        interval_seconds=float(interval),
    )


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ProjectSettingsError(f"Project settings section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ProjectSettingsError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ProjectSettingsError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ProjectSettingsError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ProjectSettingsError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ProjectSettingsError(f"{field_name} must be greater than zero.")
    return value


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ProjectSettingsError(f"{field_name} must be true or false.")
    return value
