"""Fixed-format run summary."""

from __future__ import annotations

from collections.abc import Sequence

from typo3_test_runner.run_configuration import RunConfiguration
from typo3_test_runner.suite_catalog import ExecutionStrategy
from typo3_test_runner.suite_execution import ExecutionResult

from .report_models import RunSummary, UnitStatus

RULE = "#" * 75


def summarize(results: Sequence[ExecutionResult], config: RunConfiguration) -> RunSummary:
    """Aggregate results into the exit code and the summary block.

    The exit code is the first non-zero exit code in result order, else 0.
    """
    exit_code = next((result.exit_code for result in results if result.exit_code != 0), 0)
    lines = [
        RULE,
        f"Result of {config.suite.name}",
        f"Container runtime: {config.container_engine}",
        f"Environment: {config.environment_label}",
        f"PHP: {config.php_version}",
    ]
    if config.uses_database:
        lines.append(_dbms_line(config))
    if config.dry_run or config.suite.strategy is ExecutionStrategy.SHARDED:
        lines.extend(_unit_line(result) for result in results)
    lines.append("SUCCESS" if exit_code == 0 else "FAILURE")
    lines.append(RULE)
    return RunSummary(exit_code=exit_code, text="\n".join(lines))


def _dbms_line(config: RunConfiguration) -> str:
    database = config.database
    if database.engine == "sqlite":
        return f"DBMS: {database.engine}  driver pdo_sqlite"
    return (
        f"DBMS: {database.engine}  version {database.version}  "
        f"driver {database.effective_driver}"
    )


def _unit_line(result: ExecutionResult) -> str:
    if result.rendered_command is not None:
        return f"{UnitStatus.RENDERED.value}  {result.rendered_command}"
    status = UnitStatus.OK if result.succeeded else UnitStatus.FAILED
    label = result.input_file or result.unit_name
    return f"{status.value:<6}  {result.duration_seconds:6.1f}s  {label}"
