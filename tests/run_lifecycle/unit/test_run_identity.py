"""Run identity tests."""

from __future__ import annotations

from typo3_test_runner.container_engine import RUN_LABEL_KEY
from typo3_test_runner.run_lifecycle import RunIdentity


def test_names_and_labels_derive_from_token() -> None:
    identity = RunIdentity.create("my-extension", token_factory=lambda: "a1b2c3")

    assert identity.network_name == "my-extension-a1b2c3"
    assert identity.container_name("mariadb-func") == "mariadb-func-a1b2c3"
    assert identity.labels == {RUN_LABEL_KEY: "a1b2c3"}
    assert identity.label_filter == f"{RUN_LABEL_KEY}=a1b2c3"


def test_concurrent_invocations_get_distinct_names() -> None:
    first = RunIdentity.create("my-extension")
    second = RunIdentity.create("my-extension")

    assert first.token != second.token
    assert first.network_name != second.network_name
    assert len(first.token) == 12
