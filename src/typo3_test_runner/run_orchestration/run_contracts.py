"""Run orchestration entities."""

from __future__ import annotations

from dataclasses import dataclass

from typo3_test_runner.results_reporting import RunSummary
from typo3_test_runner.run_lifecycle import RunIdentity
from typo3_test_runner.service_provisioning import ServiceHandle
from typo3_test_runner.suite_execution import ExecutionResult


@dataclass(frozen=True)
class RunOutcome:
    """Output contract for one completed run."""

    summary: RunSummary
    results: tuple[ExecutionResult, ...]
    identity: RunIdentity
    services: tuple[ServiceHandle, ...] = ()
    network_name: str | None = None

    @property
    def exit_code(self) -> int:
        return self.summary.exit_code

    @property
    def failed_results(self) -> tuple[ExecutionResult, ...]:
        return tuple(result for result in self.results if not result.succeeded)
