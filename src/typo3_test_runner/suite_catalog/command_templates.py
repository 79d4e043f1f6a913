"""Fixed command templates, one per suite."""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from typing import Any

from .suite_definitions import (
    SUITE_ALIASES,
    CommandContext,
    CommandTemplate,
    DatabaseSupport,
    ExecutionStrategy,
    HostPreparation,
    RuntimeImage,
    SuiteCommand,
    SuiteDefinition,
    SuiteId,
    XdebugUse,
)

PHP_OPCACHE_OPTIONS = (
    "-d",
    "opcache.enable_cli=1",
    "-d",
    "opcache.jit=1255",
    "-d",
    "opcache.jit_buffer_size=128M",
)
PHPUNIT = ".Build/bin/phpunit"
UNIT_CONFIG = "Tests/Build/phpunit.xml"
FUNCTIONAL_CONFIG = "Tests/Build/FunctionalTests.xml"
COVERAGE_DIR = ".Build/coverage"
RENDERED_DOCUMENTATION_DIR = "Documentation-GENERATED-temp"

CACHE_PATHS = (
    ".Build/.cache",
    ".php-cs-fixer.cache",
    "Tests/Build/.phpunit.cache",
    "var/",
)


def _php(*arguments: str) -> tuple[str, ...]:
    return ("php", *PHP_OPCACHE_OPTIONS, *arguments)


def _unit(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=_php(
            PHPUNIT,
            "-c",
            UNIT_CONFIG,
            "--testsuite",
            "Unit",
            *context.extra_test_options,
            *context.extra_arguments,
        )
    )


def _unit_coverage(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=(
            "php",
            "-d",
            "opcache.enable_cli=1",
            PHPUNIT,
            "-c",
            UNIT_CONFIG,
            "--testsuite",
            "Unit",
            f"--coverage-clover={COVERAGE_DIR}/unit.xml",
            f"--coverage-html={COVERAGE_DIR}/html-unit",
            "--coverage-text",
            *context.extra_arguments,
        ),
        preparation=HostPreparation(create_dirs=(COVERAGE_DIR,)),
    )


def _functional(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=_php(
            PHPUNIT,
            "-c",
            FUNCTIONAL_CONFIG,
            "--exclude-group",
            f"not-{context.dbms}",
            *context.extra_test_options,
            *context.extra_arguments,
        )
    )


def _functional_coverage(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=(
            "php",
            "-d",
            "opcache.enable_cli=1",
            PHPUNIT,
            "-c",
            FUNCTIONAL_CONFIG,
            f"--coverage-clover={COVERAGE_DIR}/functional.xml",
            f"--coverage-html={COVERAGE_DIR}/html-functional",
            "--coverage-text",
            *context.extra_arguments,
        ),
        preparation=HostPreparation(create_dirs=(COVERAGE_DIR,)),
    )


def _functional_parallel(context: CommandContext) -> SuiteCommand:
    if context.input_file is None:
        raise ValueError("functionalParallel units require an input file.")
    return SuiteCommand(
        argv=_php(
            "-dxdebug.mode=off",
            PHPUNIT,
            "-c",
            FUNCTIONAL_CONFIG,
            *context.extra_test_options,
            context.input_file,
        )
    )


def _fuzz(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=_php(
            PHPUNIT,
            "-c",
            UNIT_CONFIG,
            "--testsuite",
            "Fuzz",
            *context.extra_arguments,
        )
    )


def _lint(_: CommandContext) -> SuiteCommand:
    php_lint = shlex.join(_php("-dxdebug.mode=off", "-l"))
    script = (
        "find . -name \\*.php ! -path \"./.Build/*\" -print0"
        f" | xargs -0 -n1 -P$(nproc) {php_lint} >/dev/null"
    )
    return SuiteCommand(argv=(script,), shell=True, composer_environment=True)


def _static_analysis(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=_php("-dxdebug.mode=off", ".Build/bin/phpstan", "analyse", *context.extra_arguments),
        composer_environment=True,
    )


def _static_analysis_baseline(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=_php(
            "-dxdebug.mode=off",
            ".Build/bin/phpstan",
            "analyse",
            "--generate-baseline",
            "-v",
            *context.extra_arguments,
        ),
        composer_environment=True,
    )


def _style_check(context: CommandContext) -> SuiteCommand:
    check_flags = ("--dry-run", "--diff") if context.check_only else ()
    return SuiteCommand(
        argv=_php(
            "-dxdebug.mode=off",
            ".Build/bin/php-cs-fixer",
            "fix",
            "-v",
            *check_flags,
            *context.extra_arguments,
        ),
        composer_environment=True,
    )


def _rector(context: CommandContext) -> SuiteCommand:
    check_flags = ("-n",) if context.check_only else ()
    return SuiteCommand(
        argv=(
            "php",
            "-dxdebug.mode=off",
            ".Build/bin/rector",
            *check_flags,
            "--clear-cache",
            *context.extra_arguments,
        ),
        composer_environment=True,
    )


def _e2e(context: CommandContext) -> SuiteCommand:
    playwright = shlex.join(("npx", "playwright", "test", *context.extra_arguments))
    return SuiteCommand(
        argv=(f"npm ci && {playwright}",),
        shell=True,
        preparation=HostPreparation(create_dirs=(".Build/.cache/npm", "node_modules")),
    )


def _mutation(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=(
            "php",
            "-d",
            "opcache.enable_cli=1",
            ".Build/bin/infection",
            "--configuration=infection.json5",
            "--threads=4",
            *context.extra_arguments,
        )
    )


def _composer(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(argv=("composer", *context.extra_arguments), composer_environment=True)


def _composer_normalize(context: CommandContext) -> SuiteCommand:
    check_flags = ("-n",) if context.check_only else ()
    return SuiteCommand(argv=("composer", "normalize", *check_flags), composer_environment=True)


def _composer_validate(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=("composer", "validate", *context.extra_arguments), composer_environment=True
    )


def _dependency_update(_: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=("composer", "install", "--no-ansi", "--no-interaction", "--no-progress"),
        composer_environment=True,
        preparation=HostPreparation(remove_paths=(".Build/bin/", ".Build/vendor", "composer.lock")),
    )


def _render_documentation(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=("--config=Documentation", *context.extra_arguments),
        preparation=HostPreparation(create_dirs=(RENDERED_DOCUMENTATION_DIR,)),
    )


def _test_render_documentation(context: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=("--config=Documentation", "--no-progress", "--fail-on-log", *context.extra_arguments),
        preparation=HostPreparation(create_dirs=(RENDERED_DOCUMENTATION_DIR,)),
    )


def _clean(_: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=(),
        preparation=HostPreparation(remove_paths=(*CACHE_PATHS, RENDERED_DOCUMENTATION_DIR)),
    )


def _clean_cache(_: CommandContext) -> SuiteCommand:
    return SuiteCommand(argv=(), preparation=HostPreparation(remove_paths=CACHE_PATHS))


def _clean_rendered_documentation(_: CommandContext) -> SuiteCommand:
    return SuiteCommand(
        argv=(), preparation=HostPreparation(remove_paths=(RENDERED_DOCUMENTATION_DIR,))
    )


def _image_update(_: CommandContext) -> SuiteCommand:
    return SuiteCommand(argv=())


def _definition(
    suite_id: SuiteId,
    summary: str,
    template: CommandTemplate,
    *,
    strategy: ExecutionStrategy = ExecutionStrategy.SINGLE,
    runtime: RuntimeImage = RuntimeImage.PHP,
    **options: Any,
) -> SuiteDefinition:
    return SuiteDefinition(
        suite_id=suite_id,
        summary=summary,
        strategy=strategy,
        runtime=runtime,
        template=template,
        **options,
    )


_HOST = {"strategy": ExecutionStrategy.HOST, "runtime": RuntimeImage.NONE}

SUITE_CATALOG: Mapping[SuiteId, SuiteDefinition] = {
    definition.suite_id: definition
    for definition in (
        _definition(SuiteId.UNIT, "PHP unit tests", _unit, xdebug=XdebugUse.DEBUGGABLE),
        _definition(
            SuiteId.UNIT_COVERAGE,
            "Unit tests with coverage",
            _unit_coverage,
            xdebug=XdebugUse.COVERAGE,
        ),
        _definition(
            SuiteId.FUNCTIONAL,
            "PHP functional tests",
            _functional,
            database=DatabaseSupport.ANY,
            xdebug=XdebugUse.DEBUGGABLE,
            uses_services=True,
        ),
        _definition(
            SuiteId.FUNCTIONAL_COVERAGE,
            "Functional tests with coverage",
            _functional_coverage,
            database=DatabaseSupport.SQLITE_ONLY,
            xdebug=XdebugUse.COVERAGE,
        ),
        _definition(
            SuiteId.FUNCTIONAL_PARALLEL,
            "Functional tests, one container per test file",
            _functional_parallel,
            strategy=ExecutionStrategy.SHARDED,
            database=DatabaseSupport.SQLITE_ONLY,
            xdebug=XdebugUse.DEBUGGABLE,
        ),
        _definition(SuiteId.FUZZ, "Fuzz tests", _fuzz, xdebug=XdebugUse.DEBUGGABLE),
        _definition(SuiteId.LINT, "PHP syntax check", _lint),
        _definition(SuiteId.STATIC_ANALYSIS, "PHPStan static analysis", _static_analysis),
        _definition(
            SuiteId.STATIC_ANALYSIS_BASELINE,
            "Generate PHPStan baseline",
            _static_analysis_baseline,
        ),
        _definition(
            SuiteId.STYLE_CHECK,
            "PHP CS Fixer check and fix",
            _style_check,
            supports_check_mode=True,
        ),
        _definition(SuiteId.RECTOR, "Apply Rector rules", _rector, supports_check_mode=True),
        _definition(
            SuiteId.E2E,
            "Playwright E2E tests against a running TYPO3",
            _e2e,
            runtime=RuntimeImage.PLAYWRIGHT,
            uses_services=True,
        ),
        _definition(
            SuiteId.MUTATION, "Mutation testing", _mutation, xdebug=XdebugUse.COVERAGE
        ),
        _definition(SuiteId.COMPOSER, "Run composer with arguments", _composer),
        _definition(
            SuiteId.COMPOSER_NORMALIZE,
            "Normalize composer.json",
            _composer_normalize,
            supports_check_mode=True,
        ),
        _definition(SuiteId.COMPOSER_VALIDATE, "Validate composer.json", _composer_validate),
        _definition(SuiteId.DEPENDENCY_UPDATE, "Update dependencies", _dependency_update),
        _definition(
            SuiteId.RENDER_DOCUMENTATION,
            "Render documentation",
            _render_documentation,
            runtime=RuntimeImage.DOCUMENTATION,
        ),
        _definition(
            SuiteId.TEST_RENDER_DOCUMENTATION,
            "Test documentation rendering",
            _test_render_documentation,
            runtime=RuntimeImage.DOCUMENTATION,
        ),
        _definition(SuiteId.CLEAN, "Clean temporary files", _clean, **_HOST),
        _definition(SuiteId.CLEAN_CACHE, "Clean cache folders", _clean_cache, **_HOST),
        _definition(
            SuiteId.CLEAN_RENDERED_DOCUMENTATION,
            "Clean rendered documentation",
            _clean_rendered_documentation,
            **_HOST,
        ),
        _definition(SuiteId.IMAGE_UPDATE, "Update container images", _image_update, **_HOST),
    )
}


def lookup_suite(identifier: str) -> SuiteDefinition | None:
    """Return the catalog entry for a suite identifier or one of its aliases."""
    alias = SUITE_ALIASES.get(identifier)
    if alias is not None:
        return SUITE_CATALOG[alias]
    try:
        return SUITE_CATALOG[SuiteId(identifier)]
    except ValueError:
        return None
