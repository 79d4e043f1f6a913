"""Configuration resolver: CLI input to an immutable run configuration."""

from __future__ import annotations

import shlex

from typo3_test_runner.container_engine import ENGINE_PREFERENCE
from typo3_test_runner.project_settings.settings_models import ProjectSettings
from typo3_test_runner.suite_catalog import DatabaseSupport, SuiteDefinition, lookup_suite

from .database_matrix import (
    DATABASE_ENGINES,
    DEFAULT_DBMS,
    DEFAULT_PHP_VERSION,
    DEFAULT_XDEBUG_PORT,
    PHP_VERSIONS,
)
from .run_settings import (
    DatabaseSelection,
    RawRunOptions,
    RunConfiguration,
    RunEnvironment,
    XdebugSettings,
)

SUPPORTED_CONTAINER_ENGINES = ("docker", "podman")
PASS_THROUGH_PREFIXES = ("MOCK_OAUTH_", "PLAYWRIGHT_")


class ConfigError(Exception):
    """Raised when CLI input does not describe a valid run."""


class UnknownSuiteError(ConfigError):
    """Raised for a suite identifier outside the catalog."""


class IncompatibleOptionError(ConfigError):
    """Raised when supplied options contradict each other or the compatibility table."""


class MissingRequiredValueError(ConfigError):
    """Raised when a required value is empty."""


def resolve_run_configuration(
    options: RawRunOptions,
    *,
    environment: RunEnvironment,
    project: ProjectSettings,
) -> RunConfiguration:
    """Validate raw options and apply defaults; never returns a partial configuration."""
    suite = _resolve_suite(options.suite)
    database = _resolve_database(options, suite)
    php_version = _resolve_php_version(options.php_version)
    debug = _resolve_xdebug(options)
    container_engine = _resolve_container_engine(options.container_engine, environment)
    _validate_check_mode(options, suite)
    if options.workers is not None and options.workers < 1:
        raise IncompatibleOptionError(f"Invalid option -j {options.workers}: must be at least 1")

    variables = environment.variables
    return RunConfiguration(
        suite=suite,
        database=database,
        php_version=php_version,
        debug=debug,
        dry_run=options.dry_run,
        check_only=options.check_only,
        container_engine=container_engine,
        extra_arguments=tuple(options.extra_arguments),
        ci=environment.is_ci,
        interactive=not environment.is_ci,
        ci_declared=environment.ci_declared,
        project_root=environment.project_root,
        project=project,
        workers=options.workers,
        base_url=variables.get("TYPO3_BASE_URL") or None,
        extra_test_options=tuple(shlex.split(variables.get("EXTRA_TEST_OPTIONS", ""))),
        engine_run_options=tuple(shlex.split(variables.get("CI_PARAMS", ""))),
        pass_through_environment={
            key: value
            for key, value in sorted(variables.items())
            if key.startswith(PASS_THROUGH_PREFIXES)
        },
        host_uid=environment.host_uid,
        platform=environment.platform,
    )


def _resolve_suite(identifier: str) -> SuiteDefinition:
    if not identifier or not identifier.strip():
        raise MissingRequiredValueError("Option -s requires a suite name")
    suite = lookup_suite(identifier.strip())
    if suite is None:
        raise UnknownSuiteError(f"Invalid -s option argument {identifier}")
    return suite


def _resolve_database(options: RawRunOptions, suite: SuiteDefinition) -> DatabaseSelection:
    engine_name = options.dbms if options.dbms is not None else DEFAULT_DBMS
    if not engine_name.strip():
        raise MissingRequiredValueError("Option -d requires a database engine")
    engine = DATABASE_ENGINES.get(engine_name)
    if engine is None:
        raise IncompatibleOptionError(f"Invalid option -d {engine_name}")

    if options.db_driver is not None:
        if not engine.accepts_driver or options.db_driver not in engine.drivers:
            raise IncompatibleOptionError(
                f"Invalid combination -d {engine_name} -a {options.db_driver}"
            )
    if options.dbms_version is not None:
        if not engine.accepts_version or options.dbms_version not in engine.versions:
            raise IncompatibleOptionError(
                f"Invalid combination -d {engine_name} -i {options.dbms_version}"
            )

    if suite.database is DatabaseSupport.NONE and _database_options_given(options):
        raise IncompatibleOptionError(
            f"Options -d/-i/-a are not supported by suite {suite.name}"
        )
    if suite.database is DatabaseSupport.SQLITE_ONLY and engine_name != DEFAULT_DBMS:
        raise IncompatibleOptionError(
            f"Invalid combination -s {suite.name} -d {engine_name}: only sqlite is supported"
        )

    return DatabaseSelection(
        engine=engine_name,
        version=options.dbms_version or engine.default_version,
        driver=options.db_driver or engine.default_driver,
    )


def _database_options_given(options: RawRunOptions) -> bool:
    explicit_engine = options.dbms is not None and options.dbms != DEFAULT_DBMS
    return explicit_engine or options.dbms_version is not None or options.db_driver is not None


def _resolve_php_version(value: str | None) -> str:
    if value is None:
        return DEFAULT_PHP_VERSION
    if value not in PHP_VERSIONS:
        raise IncompatibleOptionError(f"Invalid option -p {value}")
    return value


def _resolve_xdebug(options: RawRunOptions) -> XdebugSettings:
    port = options.xdebug_port if options.xdebug_port is not None else DEFAULT_XDEBUG_PORT
    if not 0 < port < 65536:
        raise IncompatibleOptionError(f"Invalid option -y {port}")
    return XdebugSettings(enabled=options.xdebug, port=port)


def _resolve_container_engine(value: str | None, environment: RunEnvironment) -> str:
    if value is not None:
        if value not in SUPPORTED_CONTAINER_ENGINES:
            raise IncompatibleOptionError(f"Invalid option -b {value}")
        return value
    if environment.available_engines:
        return environment.available_engines[0]
    return ENGINE_PREFERENCE[-1]


def _validate_check_mode(options: RawRunOptions, suite: SuiteDefinition) -> None:
    if options.check_only and not suite.supports_check_mode:
        raise IncompatibleOptionError(f"Option -k is not supported by suite {suite.name}")
