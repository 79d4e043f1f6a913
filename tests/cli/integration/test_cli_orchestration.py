"""CLI orchestration integration tests."""

from __future__ import annotations

import signal
from pathlib import Path

from click.testing import CliRunner
from container_fakes import FakeContainerRuntime
from run_fixtures import write_functional_tests
from typo3_test_runner.cli import cli, main
from typo3_test_runner.run_lifecycle import RunIdentity, RunInterrupted
from typo3_test_runner.run_orchestration import execute_suite_run


class ReadyProbe:
    def attempt(self, _target) -> bool:
        return True


def _use_fake_runtime(monkeypatch, runtime: FakeContainerRuntime, engines=("docker",)) -> list:
    configs: list = []

    def fake_execute(config):
        configs.append(config)
        return execute_suite_run(
            config,
            engine_factory=runtime.engine,
            identity_factory=lambda prefix: RunIdentity(prefix=prefix, token="cafe01"),
            probe_factory=lambda _target: ReadyProbe(),
            cpu_count=4,
            sleep=lambda _seconds: None,
        )

    monkeypatch.setattr("typo3_test_runner.cli.detect_container_engines", lambda: engines)
    monkeypatch.setattr("typo3_test_runner.cli.execute_suite_run", fake_execute)
    return configs


def test_run_without_command_name_defaults_to_unit_suite(
    tmp_path: Path, monkeypatch, capsys
) -> None:
    monkeypatch.chdir(tmp_path)
    runtime = FakeContainerRuntime()
    configs = _use_fake_runtime(monkeypatch, runtime)

    exit_code = main([])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert configs[0].suite.name == "unit"
    assert "Result of unit" in captured.err
    assert "SUCCESS" in captured.err
    (suite_run,) = runtime.foreground_runs
    assert suite_run.image == "ghcr.io/typo3/core-testing-php84:latest"


def test_suite_exit_code_becomes_process_exit_code(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    runtime = FakeContainerRuntime(exit_code_for=lambda run: 0 if run.detached else 3)
    _use_fake_runtime(monkeypatch, runtime)

    exit_code = main(["-s", "functional", "-d", "mariadb", "-i", "11.4"])
    captured = capsys.readouterr()

    assert exit_code == 3
    assert "DBMS: mariadb  version 11.4  driver mysqli" in captured.err
    assert "FAILURE" in captured.err
    assert runtime.networks == set()
    assert runtime.containers == {}


def test_extra_arguments_are_forwarded_to_suite(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    runtime = FakeContainerRuntime()
    _use_fake_runtime(monkeypatch, runtime)

    exit_code = main(["-s", "unit", "--", "--filter", "SlugHelperTest"])

    assert exit_code == 0
    (suite_run,) = runtime.foreground_runs
    assert suite_run.command[-2:] == ("--filter", "SlugHelperTest")


def test_unknown_options_are_forwarded_to_suite(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    runtime = FakeContainerRuntime()
    _use_fake_runtime(monkeypatch, runtime)

    exit_code = main(["-s", "phpstan", "--memory-limit=1G"])

    assert exit_code == 0
    (suite_run,) = runtime.foreground_runs
    assert suite_run.command[-1] == "--memory-limit=1G"


def test_dry_run_prints_commands_and_touches_nothing(
    tmp_path: Path, monkeypatch, capsys
) -> None:
    monkeypatch.chdir(tmp_path)
    runtime = FakeContainerRuntime()
    _use_fake_runtime(monkeypatch, runtime, engines=())

    exit_code = main(["-s", "cgl", "-n"])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert runtime.calls == []
    assert "DRY-RUN  docker run" in captured.err
    assert "--dry-run --diff" in captured.err


def test_sharded_run_reports_failed_file_output(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    files = write_functional_tests(
        tmp_path,
        ["Tests/Functional/ATest.php", "Tests/Functional/BTest.php", "Tests/Functional/CTest.php"],
    )
    runtime = FakeContainerRuntime(
        exit_code_for=lambda run: 1 if run.command[-1] == files[1] else 0
    )
    _use_fake_runtime(monkeypatch, runtime)

    exit_code = main(["-s", "functionalParallel", "-j", "2"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "--- Tests/Functional/BTest.php ---" in captured.err
    assert "output of functionalParallel-1-cafe01" in captured.err
    assert "OK      " in captured.err


def test_update_images_flag_selects_image_update(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    runtime = FakeContainerRuntime(images=["ghcr.io/typo3/core-testing-php84:latest"])
    configs = _use_fake_runtime(monkeypatch, runtime)

    exit_code = main(["-u"])

    assert exit_code == 0
    assert configs[0].suite.name == "imageUpdate"
    assert ("docker", "pull", "ghcr.io/typo3/core-testing-php84:latest") in runtime.calls


def test_project_settings_file_is_applied(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "Build").mkdir()
    (tmp_path / "Build/runTests.yaml").write_text(
        "network_prefix: news\ncomposer_root_version: 12.x-dev\n", encoding="utf-8"
    )
    runtime = FakeContainerRuntime()
    _use_fake_runtime(monkeypatch, runtime)

    exit_code = main(["-s", "composerValidate"])

    assert exit_code == 0
    assert runtime.removed_networks == ["news-cafe01"]
    (suite_run,) = runtime.foreground_runs
    assert suite_run.environment["COMPOSER_ROOT_VERSION"] == "12.x-dev"


def test_interrupted_run_exits_with_code_two(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)

    def interrupted(_config):
        raise RunInterrupted(signal.SIGINT)

    monkeypatch.setattr("typo3_test_runner.cli.detect_container_engines", lambda: ("docker",))
    monkeypatch.setattr("typo3_test_runner.cli.execute_suite_run", interrupted)

    exit_code = main(["-s", "unit"])

    assert exit_code == 2
    assert "Interrupted by SIGINT" in capsys.readouterr().err


def test_generate_config_command_writes_default_file(tmp_path: Path) -> None:
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=str(tmp_path)):
        result = runner.invoke(cli, ["generate-config"])
        output_path = Path("Build/runTests.yaml").resolve()

        assert result.exit_code == 0
        assert output_path.exists()
        content = output_path.read_text(encoding="utf-8")
        assert "network_prefix:" in content
        assert "# readiness:" in content
        assert str(output_path) in result.output
