"""Boundary tests for internal package dependencies."""

from __future__ import annotations

from pathlib import Path

PACKAGE = "typo3_test_runner"


def _package_dir() -> Path:
    return Path(__file__).resolve().parents[3] / "src" / PACKAGE


def _imports_in(package: str) -> str:
    return "\n".join(
        path.read_text(encoding="utf-8") for path in sorted((_package_dir() / package).glob("*.py"))
    )


def test_suite_catalog_is_pure_data() -> None:
    text = _imports_in("suite_catalog")

    assert f"from {PACKAGE}." not in text
    assert "subprocess" not in text


def test_container_engine_does_not_depend_on_other_packages() -> None:
    assert f"from {PACKAGE}." not in _imports_in("container_engine")


def test_lower_layers_do_not_import_orchestration_or_cli() -> None:
    forbidden_import_fragments = (f"{PACKAGE}.run_orchestration", f"{PACKAGE}.cli")
    for package in (
        "container_engine",
        "readiness_probing",
        "run_lifecycle",
        "service_provisioning",
        "suite_execution",
        "results_reporting",
    ):
        text = _imports_in(package)
        for fragment in forbidden_import_fragments:
            assert fragment not in text, f"Forbidden dependency in {package}: {fragment}"
