"""Run configuration entities."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from typo3_test_runner.project_settings.settings_models import ProjectSettings
from typo3_test_runner.suite_catalog import DatabaseSupport, SuiteDefinition

from .database_matrix import DATABASE_ENGINES


@dataclass(frozen=True)
class RawRunOptions:  # pylint: disable=too-many-instance-attributes
    """Unvalidated CLI input."""

    suite: str = "unit"
    dbms: str | None = None
    dbms_version: str | None = None
    db_driver: str | None = None
    php_version: str | None = None
    xdebug: bool = False
    xdebug_port: int | None = None
    dry_run: bool = False
    check_only: bool = False
    container_engine: str | None = None
    workers: int | None = None
    extra_arguments: tuple[str, ...] = ()


@dataclass(frozen=True)
class RunEnvironment:
    """Process environment the resolver reads from."""

    project_root: Path
    available_engines: tuple[str, ...]
    variables: Mapping[str, str] = field(default_factory=dict)
    stdin_is_tty: bool = False
    platform: str = sys.platform
    host_uid: int | None = None

    @classmethod
    def from_process(
        cls, project_root: Path, available_engines: tuple[str, ...]
    ) -> RunEnvironment:
        getuid = getattr(os, "getuid", None)
        return cls(
            project_root=project_root.resolve(),
            available_engines=available_engines,
            variables=dict(os.environ),
            stdin_is_tty=sys.stdin is not None and sys.stdin.isatty(),
            platform=sys.platform,
            host_uid=getuid() if getuid else None,
        )

    @property
    def ci_declared(self) -> bool:
        return self.variables.get("CI") == "true"

    @property
    def is_ci(self) -> bool:
        return self.ci_declared or not self.stdin_is_tty


@dataclass(frozen=True)
class DatabaseSelection:
    """Validated database engine, version and client driver."""

    engine: str = "sqlite"
    version: str | None = None
    driver: str | None = None

    @property
    def effective_driver(self) -> str | None:
        return self.driver or DATABASE_ENGINES[self.engine].implied_driver


@dataclass(frozen=True)
class XdebugSettings:
    """Remote debugger switches."""

    enabled: bool = False
    port: int = 9003


@dataclass(frozen=True)
class RunConfiguration:  # pylint: disable=too-many-instance-attributes
    """Immutable configuration of one invocation."""

    suite: SuiteDefinition
    database: DatabaseSelection
    php_version: str
    debug: XdebugSettings
    dry_run: bool
    check_only: bool
    container_engine: str
    extra_arguments: tuple[str, ...]
    ci: bool
    interactive: bool
    project_root: Path
    project: ProjectSettings
    workers: int | None = None
    ci_declared: bool = False
    base_url: str | None = None
    extra_test_options: tuple[str, ...] = ()
    engine_run_options: tuple[str, ...] = ()
    pass_through_environment: Mapping[str, str] = field(default_factory=dict)
    host_uid: int | None = None
    platform: str = sys.platform

    @property
    def environment_label(self) -> str:
        return "CI" if self.ci else "local"

    @property
    def uses_database(self) -> bool:
        return self.suite.database is not DatabaseSupport.NONE
