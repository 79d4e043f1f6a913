"""CLI error-handling tests."""

from __future__ import annotations

from pathlib import Path

from typo3_test_runner.cli import main


def _no_engines(monkeypatch) -> None:
    monkeypatch.setattr("typo3_test_runner.cli.detect_container_engines", lambda: ())


def test_unknown_suite_returns_config_error(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    _no_engines(monkeypatch)

    exit_code = main(["-s", "acceptance"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "Invalid -s option argument acceptance" in captured.err
    assert "Traceback" not in captured.err


def test_invalid_combination_names_offending_options(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    _no_engines(monkeypatch)

    exit_code = main(["-s", "functional", "-d", "postgres", "-a", "mysqli"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "-d postgres -a mysqli" in captured.err


def test_check_mode_on_unsupported_suite_is_rejected(
    tmp_path: Path, monkeypatch, capsys
) -> None:
    monkeypatch.chdir(tmp_path)
    _no_engines(monkeypatch)

    exit_code = main(["-s", "unit", "-k"])

    assert exit_code == 1
    assert "Option -k is not supported by suite unit" in capsys.readouterr().err


def test_missing_container_engine_is_reported(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    _no_engines(monkeypatch)

    exit_code = main(["-s", "lint"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "Container engine 'docker' not found" in captured.err


def test_non_integer_option_returns_clean_click_error(capsys) -> None:
    exit_code = main(["-s", "functionalParallel", "-j", "many"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "Invalid value" in captured.err
    assert "Traceback" not in captured.err


def test_invalid_project_settings_are_reported(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    _no_engines(monkeypatch)
    settings = tmp_path / "settings.yaml"
    settings.write_text("ci_workers: 0\n", encoding="utf-8")

    exit_code = main(["-c", str(settings), "-s", "clean"])

    assert exit_code == 1
    assert "ci_workers" in capsys.readouterr().err


def test_generate_config_refuses_to_overwrite(tmp_path: Path, capsys) -> None:
    output_path = tmp_path / "runTests.yaml"
    output_path.write_text("network_prefix: keep\n", encoding="utf-8")

    exit_code = main(["generate-config", "--output", str(output_path)])

    assert exit_code == 1
    assert "already exists" in capsys.readouterr().err
    assert output_path.read_text(encoding="utf-8") == "network_prefix: keep\n"


def test_unremovable_host_path_returns_environment_error(
    tmp_path: Path, monkeypatch, capsys
) -> None:
    monkeypatch.chdir(tmp_path)
    _no_engines(monkeypatch)
    (tmp_path / ".Build/.cache").mkdir(parents=True)

    def _root_owned(path, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr("typo3_test_runner.suite_execution.host_actions.shutil.rmtree", _root_owned)

    exit_code = main(["-s", "clean"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "Could not remove" in captured.err
    assert "Permission denied" in captured.err
    assert "Traceback" not in captured.err


def test_update_images_flag_conflicts_with_another_suite(
    tmp_path: Path, monkeypatch, capsys
) -> None:
    monkeypatch.chdir(tmp_path)
    _no_engines(monkeypatch)

    exit_code = main(["-s", "functional", "-u"])

    assert exit_code == 1
    assert "Invalid option -u combined with -s functional" in capsys.readouterr().err
