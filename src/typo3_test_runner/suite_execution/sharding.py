"""Shard discovery, partitioning and worker sizing."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TypeVar

FUNCTIONAL_TEST_DIR = "Tests/Functional"
FUNCTIONAL_TEST_PATTERN = "*Test.php"

T = TypeVar("T")


def discover_shard_inputs(project_root: Path) -> list[str]:
    """Return project-relative functional test files in a stable, sorted order."""
    base = project_root / FUNCTIONAL_TEST_DIR
    if not base.is_dir():
        return []
    return sorted(
        path.relative_to(project_root).as_posix()
        for path in base.rglob(FUNCTIONAL_TEST_PATTERN)
        if path.is_file()
    )


def partition_into_shards(items: Sequence[T], workers: int) -> list[list[T]]:
    """Split `items` into at most `workers` contiguous shards.

    Shards preserve input order, are pairwise disjoint, cover every item and
    differ in size by at most one. Empty shards are omitted.
    """
    if workers < 1:
        raise ValueError("workers must be at least 1.")
    count = min(workers, len(items))
    if count == 0:
        return []
    base, remainder = divmod(len(items), count)
    shards: list[list[T]] = []
    start = 0
    for index in range(count):
        size = base + (1 if index < remainder else 0)
        shards.append(list(items[start : start + size]))
        start += size
    return shards


def compute_worker_count(
    *,
    explicit: int | None,
    ci: bool,
    ci_workers: int,
    cpu_count: int | None,
) -> int:
    """Explicit override, else a fixed count in CI, else half the CPUs rounded up."""
    if explicit is not None:
        return explicit
    if ci:
        return ci_workers
    return max(1, ((cpu_count or 1) + 1) // 2)
