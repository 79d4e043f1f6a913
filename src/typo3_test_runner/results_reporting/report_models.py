"""Result reporting entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UnitStatus(str, Enum):
    """Rendered status of one execution unit."""

    OK = "OK"
    FAILED = "FAILED"
    RENDERED = "DRY-RUN"


@dataclass(frozen=True)
class RunSummary:
    """Final exit code and the human-readable block printed to stderr."""

    exit_code: int
    text: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
