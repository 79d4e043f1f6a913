"""Per-invocation identity used to name and label every resource of a run."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from dataclasses import dataclass

from typo3_test_runner.container_engine import RUN_LABEL_KEY

TOKEN_BYTES = 6


def _random_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


@dataclass(frozen=True)
class RunIdentity:
    """Unique token plus the names derived from it.

    Two concurrent invocations on the same host never share a network or
    container name because every name carries the token.
    """

    prefix: str
    token: str

    @classmethod
    def create(cls, prefix: str, token_factory: Callable[[], str] | None = None) -> RunIdentity:
        factory = token_factory or _random_token
        return cls(prefix=prefix, token=factory())

    @property
    def network_name(self) -> str:
        return f"{self.prefix}-{self.token}"

    def container_name(self, role: str) -> str:
        return f"{role}-{self.token}"

    @property
    def labels(self) -> dict[str, str]:
        return {RUN_LABEL_KEY: self.token}

    @property
    def label_filter(self) -> str:
        return f"{RUN_LABEL_KEY}={self.token}"
