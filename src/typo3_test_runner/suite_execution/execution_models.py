"""Execution units and their results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from typo3_test_runner.container_engine import ContainerSpec


@dataclass(frozen=True)
class ExecutionUnit:
    """One container invocation; `order` is its submission index within the run."""

    spec: ContainerSpec
    order: int = 0
    input_file: str | None = None

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def image(self) -> str:
        return self.spec.image

    @property
    def command(self) -> tuple[str, ...]:
        return self.spec.command

    @property
    def environment(self) -> Mapping[str, str]:
        return self.spec.environment

    @property
    def working_directory(self) -> str | None:
        return self.spec.working_directory


@dataclass(frozen=True)
class ExecutionResult:  # pylint: disable=too-many-instance-attributes
    """Outcome of one unit. Test failures are data here, not exceptions."""

    suite: str
    unit_name: str
    exit_code: int
    duration_seconds: float = 0.0
    input_file: str | None = None
    rendered_command: str | None = None
    output: str = ""
    order: int = 0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
