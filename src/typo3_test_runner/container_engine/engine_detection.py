"""Container engine discovery."""

from __future__ import annotations

import shutil
from collections.abc import Callable

# Preference order when no engine is requested explicitly.
ENGINE_PREFERENCE = ("podman", "docker")

Which = Callable[[str], str | None]


class RunnerEnvironmentError(Exception):
    """Raised when the host cannot run the tool at all."""


class ContainerEngineNotFoundError(RunnerEnvironmentError):
    """Raised when the selected container engine is not installed."""


def detect_container_engines(which: Which | None = None) -> tuple[str, ...]:
    """Return installed engine binaries in preference order."""
    lookup = which or shutil.which
    return tuple(name for name in ENGINE_PREFERENCE if lookup(name))


def require_container_engine(binary: str, available: tuple[str, ...]) -> None:
    if binary not in available:
        raise ContainerEngineNotFoundError(
            f"Container engine '{binary}' not found. This tool requires docker or podman."
        )
