"""Execution unit construction tests."""

from __future__ import annotations

from pathlib import Path

from container_fakes import FakeContainerRuntime
from run_fixtures import build_config, project_settings, run_environment
from typo3_test_runner.run_lifecycle import RunIdentity
from typo3_test_runner.service_provisioning import plan_service_handles, plan_services
from typo3_test_runner.suite_execution import UnitBuilder

IDENTITY = RunIdentity(prefix="my-extension", token="abc123")
NETWORK = "my-extension-abc123"


def _builder(config, binary="docker", services=()):
    engine = FakeContainerRuntime().engine(binary)
    return UnitBuilder(config, engine, IDENTITY, network=NETWORK, services=services)


def test_unit_suite_container(tmp_path: Path) -> None:
    config = build_config(tmp_path, php_version="8.3")

    unit = _builder(config).build_single()
    spec = unit.spec

    assert unit.name == "unit-abc123"
    assert unit.image == "ghcr.io/typo3/core-testing-php83:latest"
    assert spec.network == NETWORK
    assert spec.volumes == (f"{tmp_path}:{tmp_path}",)
    assert spec.working_directory == str(tmp_path)
    assert spec.user == "1000"
    assert spec.add_hosts == ("host.docker.internal:host-gateway",)
    assert spec.labels == IDENTITY.labels
    assert spec.environment == {"XDEBUG_MODE": "off", "XDEBUG_CONFIG": " "}
    assert unit.command[-3:] == ("Tests/Build/phpunit.xml", "--testsuite", "Unit")


def test_xdebug_enabled_points_at_engine_host_alias(tmp_path: Path) -> None:
    config = build_config(tmp_path, xdebug=True, xdebug_port=9010)

    spec = _builder(config, binary="podman").build_single().spec

    assert spec.environment == {
        "XDEBUG_MODE": "debug",
        "XDEBUG_TRIGGER": "foo",
        "XDEBUG_CONFIG": "client_port=9010 client_host=host.containers.internal",
    }
    assert spec.user is None
    assert spec.add_hosts == ()


def test_coverage_suites_force_coverage_mode(tmp_path: Path) -> None:
    config = build_config(tmp_path, suite="unitCoverage", xdebug=True)

    spec = _builder(config).build_single().spec

    assert spec.environment == {"XDEBUG_MODE": "coverage"}


def test_podman_receives_ci_params(tmp_path: Path) -> None:
    environment = run_environment(tmp_path, variables={"CI_PARAMS": "--pid=host"})
    config = build_config(tmp_path, environment=environment)

    assert _builder(config, binary="podman").build_single().spec.extra_options == ("--pid=host",)
    assert _builder(config, binary="docker").build_single().spec.extra_options == ()


def test_interactive_terminal_only_for_local_single_runs(tmp_path: Path) -> None:
    local = build_config(tmp_path, environment=run_environment(tmp_path, interactive=True))
    ci = build_config(tmp_path)

    assert _builder(local).build_single().spec.interactive is True
    assert _builder(ci).build_single().spec.interactive is False


def test_composer_suites_get_composer_environment(tmp_path: Path) -> None:
    project = project_settings(composer_root_version="3.x-dev")
    config = build_config(tmp_path, suite="composerValidate", project=project)

    spec = _builder(config).build_single().spec

    assert spec.environment == {
        "COMPOSER_CACHE_DIR": ".Build/.cache/composer",
        "COMPOSER_ROOT_VERSION": "3.x-dev",
    }


def test_lint_runs_through_a_shell(tmp_path: Path) -> None:
    unit = _builder(build_config(tmp_path, suite="lint")).build_single()

    assert unit.command[:2] == ("/bin/sh", "-c")
    assert "xargs -0 -n1" in unit.command[2]


def test_functional_run_receives_database_connection(tmp_path: Path) -> None:
    config = build_config(tmp_path, suite="functional", dbms="postgres")
    services = plan_service_handles(plan_services(config, IDENTITY))

    spec = _builder(config, services=services).build_single().spec

    assert spec.environment["typo3DatabaseHost"] == "postgres-func-abc123"
    assert spec.environment["typo3DatabaseDriver"] == "pdo_pgsql"
    assert spec.tmpfs == ()


def test_sqlite_functional_run_uses_tmpfs_database_directory(tmp_path: Path) -> None:
    spec = _builder(build_config(tmp_path, suite="functional")).build_single().spec

    assert spec.environment["typo3DatabaseDriver"] == "pdo_sqlite"
    assert spec.tmpfs[0].startswith(f"{tmp_path}/.Build/web/typo3temp/var/tests/")


def test_e2e_container_environment(tmp_path: Path) -> None:
    environment = run_environment(
        tmp_path, variables={"PLAYWRIGHT_WORKERS": "2", "UNRELATED": "x"}
    )
    config = build_config(tmp_path, suite="e2e", environment=environment)

    unit = _builder(config).build_single()

    assert unit.image == "mcr.microsoft.com/playwright:v1.57.0-noble"
    assert unit.command[:2] == ("/bin/bash", "-c")
    assert unit.command[2] == "npm ci && npx playwright test"
    assert unit.spec.environment == {
        "TYPO3_BASE_URL": "https://my-extension.ddev.site",
        "CI": "true",
        "npm_config_cache": f"{tmp_path}/.Build/.cache/npm",
        "PLAYWRIGHT_WORKERS": "2",
    }


def test_documentation_mounts_project_without_working_directory(tmp_path: Path) -> None:
    spec = _builder(build_config(tmp_path, suite="renderDocumentation")).build_single().spec

    assert spec.image == "ghcr.io/typo3-documentation/render-guides:latest"
    assert spec.volumes == (f"{tmp_path}:/project",)
    assert spec.working_directory is None
    assert spec.extra_options == ("--pull", "always")


def test_dry_run_selects_check_only_template(tmp_path: Path) -> None:
    config = build_config(tmp_path, suite="styleCheck", dry_run=True)

    unit = _builder(config).build_single()

    assert "--dry-run" in unit.command
    assert "--diff" in unit.command


def test_check_flag_selects_check_only_template(tmp_path: Path) -> None:
    config = build_config(tmp_path, suite="composerNormalize", check_only=True)

    assert _builder(config).build_single().command == ("composer", "normalize", "-n")


def test_shard_units_are_ordered_and_named_per_file(tmp_path: Path) -> None:
    config = build_config(tmp_path, suite="functionalParallel")
    files = ["Tests/Functional/ATest.php", "Tests/Functional/BTest.php"]

    units = _builder(config).build_shard_units(files)

    assert [unit.name for unit in units] == [
        "functionalParallel-0-abc123",
        "functionalParallel-1-abc123",
    ]
    assert [unit.order for unit in units] == [0, 1]
    assert [unit.command[-1] for unit in units] == files
    assert all(unit.spec.interactive is False for unit in units)


def test_repeated_construction_is_identical(tmp_path: Path) -> None:
    config = build_config(tmp_path, suite="functional", dbms="mysql", xdebug=True)
    services = plan_service_handles(plan_services(config, IDENTITY))

    first = _builder(config, services=services).build_single()
    second = _builder(config, services=services).build_single()

    assert first.command == second.command
    assert list(first.environment.items()) == list(second.environment.items())
    assert first.working_directory == second.working_directory == str(tmp_path)
