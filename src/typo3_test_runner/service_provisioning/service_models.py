"""Backing-service descriptors and handles."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

from typo3_test_runner.readiness_probing import ReadinessTarget


@dataclass(frozen=True)
class ServiceDescriptor:  # pylint: disable=too-many-instance-attributes
    """What to start for one backing service and how to tell it is ready.

    `connection_environment` is injected into every test container of the run
    so the suite can reach the service by its container name.
    """

    role: str
    image: str
    container_name: str
    environment: Mapping[str, str] = field(default_factory=dict)
    tmpfs: tuple[str, ...] = ()
    readiness: ReadinessTarget | None = None
    connection_environment: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ServiceHandle:
    """A started (or, for dry runs, planned) service container."""

    descriptor: ServiceDescriptor
    container_name: str
    ready: bool
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def role(self) -> str:
        return self.descriptor.role
