"""Run configuration exports."""

from .database_matrix import DATABASE_ENGINES, DEFAULT_PHP_VERSION, PHP_VERSIONS
from .resolver import (
    SUPPORTED_CONTAINER_ENGINES,
    ConfigError,
    IncompatibleOptionError,
    MissingRequiredValueError,
    UnknownSuiteError,
    resolve_run_configuration,
)
from .run_settings import (
    DatabaseSelection,
    RawRunOptions,
    RunConfiguration,
    RunEnvironment,
    XdebugSettings,
)

__all__ = [
    "DATABASE_ENGINES",
    "DEFAULT_PHP_VERSION",
    "PHP_VERSIONS",
    "SUPPORTED_CONTAINER_ENGINES",
    "ConfigError",
    "DatabaseSelection",
    "IncompatibleOptionError",
    "MissingRequiredValueError",
    "RawRunOptions",
    "RunConfiguration",
    "RunEnvironment",
    "UnknownSuiteError",
    "XdebugSettings",
    "resolve_run_configuration",
]
