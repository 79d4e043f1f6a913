"""Readiness targets and outcomes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class ProbeOutcome(str, Enum):
    """Result of a bounded readiness wait."""

    READY = "ready"
    TIMEOUT = "timeout"


def status_below_400(status_code: int) -> bool:
    return status_code < 400


@dataclass(frozen=True)
class TcpTarget:
    """A TCP endpoint that is ready once it accepts connections."""

    host: str
    port: int

    def describe(self) -> str:
        return f"{self.host} port {self.port}"


@dataclass(frozen=True)
class HttpTarget:
    """An HTTP endpoint that is ready once its response satisfies `accept`.

    `json_field`, when set, additionally requires the response body to be a
    JSON object containing that key. Probes running inside the run network
    only support the default `accept`.
    """

    url: str
    accept: Callable[[int], bool] = status_below_400
    json_field: str | None = None

    def describe(self) -> str:
        return f"HTTP endpoint {self.url}"


ReadinessTarget = TcpTarget | HttpTarget
