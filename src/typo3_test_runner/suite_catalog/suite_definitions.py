"""Closed catalog of runnable suites."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum


class SuiteId(str, Enum):
    """Identifiers accepted by `-s`."""

    UNIT = "unit"
    UNIT_COVERAGE = "unitCoverage"
    FUNCTIONAL = "functional"
    FUNCTIONAL_COVERAGE = "functionalCoverage"
    FUNCTIONAL_PARALLEL = "functionalParallel"
    FUZZ = "fuzz"
    LINT = "lint"
    STATIC_ANALYSIS = "staticAnalysis"
    STATIC_ANALYSIS_BASELINE = "staticAnalysisBaseline"
    STYLE_CHECK = "styleCheck"
    RECTOR = "rector"
    E2E = "e2e"
    MUTATION = "mutation"
    COMPOSER = "composer"
    COMPOSER_NORMALIZE = "composerNormalize"
    COMPOSER_VALIDATE = "composerValidate"
    DEPENDENCY_UPDATE = "dependencyUpdate"
    RENDER_DOCUMENTATION = "renderDocumentation"
    TEST_RENDER_DOCUMENTATION = "testRenderDocumentation"
    CLEAN = "clean"
    CLEAN_CACHE = "cleanCache"
    CLEAN_RENDERED_DOCUMENTATION = "cleanRenderedDocumentation"
    IMAGE_UPDATE = "imageUpdate"


class ExecutionStrategy(str, Enum):
    """How the dispatcher turns a suite into container invocations."""

    SINGLE = "single"
    SHARDED = "sharded"
    HOST = "host"


class RuntimeImage(str, Enum):
    """Container image family a suite runs in."""

    PHP = "php"
    PLAYWRIGHT = "playwright"
    DOCUMENTATION = "documentation"
    NONE = "none"


class DatabaseSupport(str, Enum):
    """Which database engines a suite can be combined with."""

    NONE = "none"
    ANY = "any"
    SQLITE_ONLY = "sqlite"


class XdebugUse(str, Enum):
    """Xdebug environment injected into the runtime container."""

    DEBUGGABLE = "debuggable"
    COVERAGE = "coverage"
    NONE = "none"


@dataclass(frozen=True)
class CommandContext:
    """Inputs a command template may depend on."""

    check_only: bool = False
    dbms: str = "sqlite"
    extra_arguments: tuple[str, ...] = ()
    extra_test_options: tuple[str, ...] = ()
    input_file: str | None = None


@dataclass(frozen=True)
class HostPreparation:
    """Project-relative paths to create or delete on the host before a suite runs."""

    create_dirs: tuple[str, ...] = ()
    remove_paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class SuiteCommand:
    """Concrete command produced by a template for one invocation."""

    argv: tuple[str, ...]
    shell: bool = False
    composer_environment: bool = False
    preparation: HostPreparation = field(default_factory=HostPreparation)


CommandTemplate = Callable[[CommandContext], SuiteCommand]


@dataclass(frozen=True)
class SuiteDefinition:  # pylint: disable=too-many-instance-attributes
    """One variant of the suite catalog."""

    suite_id: SuiteId
    summary: str
    strategy: ExecutionStrategy
    runtime: RuntimeImage
    template: CommandTemplate
    database: DatabaseSupport = DatabaseSupport.NONE
    xdebug: XdebugUse = XdebugUse.NONE
    supports_check_mode: bool = False
    uses_services: bool = False

    @property
    def name(self) -> str:
        return self.suite_id.value

    @property
    def needs_containers(self) -> bool:
        return self.strategy is not ExecutionStrategy.HOST

    @property
    def needs_engine(self) -> bool:
        return self.needs_containers or self.suite_id is SuiteId.IMAGE_UPDATE

    def command(self, context: CommandContext) -> SuiteCommand:
        return self.template(context)


SUITE_ALIASES: Mapping[str, SuiteId] = {
    "cgl": SuiteId.STYLE_CHECK,
    "phpstan": SuiteId.STATIC_ANALYSIS,
    "phpstanBaseline": SuiteId.STATIC_ANALYSIS_BASELINE,
    "composerUpdate": SuiteId.DEPENDENCY_UPDATE,
    "update": SuiteId.IMAGE_UPDATE,
}
