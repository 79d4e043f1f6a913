"""Container engine exports."""

from .engine_commands import (
    RUN_LABEL_KEY,
    CommandRunner,
    CompletedCommand,
    ContainerEngine,
    ContainerEngineError,
    ContainerSpec,
    run_subprocess,
)
from .engine_detection import (
    ENGINE_PREFERENCE,
    ContainerEngineNotFoundError,
    RunnerEnvironmentError,
    detect_container_engines,
    require_container_engine,
)

__all__ = [
    "ENGINE_PREFERENCE",
    "RUN_LABEL_KEY",
    "CommandRunner",
    "CompletedCommand",
    "ContainerEngine",
    "ContainerEngineError",
    "ContainerEngineNotFoundError",
    "ContainerSpec",
    "RunnerEnvironmentError",
    "detect_container_engines",
    "require_container_engine",
    "run_subprocess",
]
