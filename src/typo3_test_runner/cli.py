"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from click.core import ParameterSource

from typo3_test_runner.container_engine import (
    ContainerEngineError,
    RunnerEnvironmentError,
    detect_container_engines,
    require_container_engine,
)
from typo3_test_runner.project_settings import (
    DEFAULT_SETTINGS_FILENAME,
    ProjectSettingsError,
    load_project_settings,
    write_settings_scaffold,
)
from typo3_test_runner.run_configuration import (
    ConfigError,
    IncompatibleOptionError,
    RawRunOptions,
    RunEnvironment,
    resolve_run_configuration,
)
from typo3_test_runner.run_lifecycle import NetworkCreationError, RunInterrupted
from typo3_test_runner.run_orchestration import RunOutcome, execute_suite_run
from typo3_test_runner.service_provisioning import ProvisionError
from typo3_test_runner.suite_catalog import SuiteId, lookup_suite

DEFAULT_COMMAND = "run"
INTERRUPTED_EXIT_CODE = 2
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="typo3-test-runner")
def cli() -> None:
    """Run TYPO3 extension test suites in containers."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_SETTINGS_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the project settings file to write",
)
def generate_config(output_path: str) -> None:
    """Generate a commented project settings file."""
    try:
        resolved_output = write_settings_scaffold(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="run", context_settings={"ignore_unknown_options": True})
@click.option("-s", "--suite", default="unit", show_default=True, help="Suite to run")
@click.option("-d", "--dbms", default=None, help="sqlite (default), mariadb, mysql or postgres")
@click.option("-i", "--dbms-version", default=None, help="Database engine version")
@click.option("-a", "--db-driver", default=None, help="mysqli or pdo_mysql (mariadb/mysql only)")
@click.option("-p", "--php", "php_version", default=None, help="PHP version (default 8.4)")
@click.option("-x", "--xdebug", is_flag=True, default=False, help="Enable Xdebug")
@click.option("-y", "--xdebug-port", type=int, default=None, help="Xdebug client port")
@click.option(
    "-n",
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the container commands without running them.",
)
@click.option(
    "-k",
    "--check",
    "check_only",
    is_flag=True,
    default=False,
    help="Check without fixing (styleCheck, rector, composerNormalize).",
)
@click.option(
    "-b",
    "--container-engine",
    default=None,
    help="Container engine; podman is preferred when both are installed.",
)
@click.option("-j", "--workers", type=int, default=None, help="Worker count for sharded suites")
@click.option(
    "-c",
    "--project-config",
    "project_config",
    default=None,
    type=click.Path(path_type=str),
    help="Project settings file (default Build/runTests.yaml when present)",
)
@click.option("-u", "--update-images", is_flag=True, default=False, help="Same as -s imageUpdate")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.argument("extra_arguments", nargs=-1, type=click.UNPROCESSED)
def run_suite(  # pylint: disable=too-many-arguments,too-many-locals
    suite: str,
    dbms: str | None,
    dbms_version: str | None,
    db_driver: str | None,
    php_version: str | None,
    xdebug: bool,
    xdebug_port: int | None,
    dry_run: bool,
    check_only: bool,
    container_engine: str | None,
    workers: int | None,
    project_config: str | None,
    update_images: bool,
    verbose: bool,
    extra_arguments: tuple[str, ...],
) -> int:
    """Run one test suite.

    Unknown options and everything after `--` are forwarded to the suite command.
    """
    _configure_logging(verbose)
    environment = RunEnvironment.from_process(Path.cwd(), detect_container_engines())
    try:
        options = RawRunOptions(
            suite=_selected_suite(suite, update_images),
            dbms=dbms,
            dbms_version=dbms_version,
            db_driver=db_driver,
            php_version=php_version,
            xdebug=xdebug,
            xdebug_port=xdebug_port,
            dry_run=dry_run,
            check_only=check_only,
            container_engine=container_engine,
            workers=workers,
            extra_arguments=tuple(extra_arguments),
        )
        project = load_project_settings(project_config, project_root=environment.project_root)
        config = resolve_run_configuration(options, environment=environment, project=project)
        if config.suite.needs_engine and not config.dry_run:
            require_container_engine(config.container_engine, environment.available_engines)
        outcome = execute_suite_run(config)
    except (
        ConfigError,
        ProjectSettingsError,
        RunnerEnvironmentError,
        NetworkCreationError,
        ProvisionError,
        ContainerEngineError,
    ) as exc:
        raise CliError(str(exc)) from exc
    _report(outcome)
    return outcome.exit_code


def _selected_suite(suite: str, update_images: bool) -> str:
    if not update_images:
        return suite
    source = click.get_current_context().get_parameter_source("suite")
    selected = lookup_suite(suite)
    explicit_other = selected is None or selected.suite_id is not SuiteId.IMAGE_UPDATE
    if source is ParameterSource.COMMANDLINE and explicit_other:
        raise IncompatibleOptionError(f"Invalid option -u combined with -s {suite}")
    return SuiteId.IMAGE_UPDATE.value


def _report(outcome: RunOutcome) -> None:
    for result in outcome.failed_results:
        if result.output:
            click.echo(f"--- {result.input_file or result.unit_name} ---", err=True)
            click.echo(result.output.rstrip(), err=True)
    click.echo(outcome.summary.text, err=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def _with_default_command(argv: list[str]) -> list[str]:
    """Treat invocations without a command name as `run`."""
    if argv and (argv[0] in cli.commands or argv[0] in {"-h", "--help", "--version"}):
        return argv
    return [DEFAULT_COMMAND, *argv]


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        exit_code = cli.main(args=_with_default_command(list(argv)), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except RunInterrupted as exc:
        click.echo(str(exc), err=True)
        return INTERRUPTED_EXIT_CODE
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return exit_code if isinstance(exit_code, int) else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
