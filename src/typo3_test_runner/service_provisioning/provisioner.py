"""Start backing services and wait until each one is ready."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime

from typo3_test_runner.container_engine import ContainerEngine, ContainerEngineError, ContainerSpec
from typo3_test_runner.project_settings import ReadinessSettings
from typo3_test_runner.readiness_probing import (
    HttpTarget,
    Probe,
    ProbeOutcome,
    ReadinessTarget,
    wait_until_ready,
)
from typo3_test_runner.run_lifecycle import CleanupCoordinator, NetworkHandle

from .service_models import ServiceDescriptor, ServiceHandle

LOGGER = logging.getLogger("typo3_test_runner.services")

ProbeFactory = Callable[[ReadinessTarget], Probe]


class ProvisionError(Exception):
    """Raised when a backing service cannot be brought up."""


class ContainerStartError(ProvisionError):
    """Raised when the engine refuses to start a service container."""


class ServiceNotReadyError(ProvisionError):
    """Raised when a service does not become ready within its retry budget."""

    def __init__(self, descriptor: ServiceDescriptor, attempts: int) -> None:
        target = descriptor.readiness.describe() if descriptor.readiness else descriptor.role
        super().__init__(
            f"Service {descriptor.role} ({descriptor.container_name}) not ready: "
            f"can not connect to {target} after {attempts} attempts"
        )
        self.descriptor = descriptor


def provision_services(
    descriptors: Sequence[ServiceDescriptor],
    *,
    network: NetworkHandle,
    engine: ContainerEngine,
    cleanup: CleanupCoordinator,
    probe_factory: ProbeFactory,
    readiness: ReadinessSettings,
    labels: Mapping[str, str] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[ServiceHandle]:
    """Start services in declaration order; each is registered for cleanup once started."""
    handles: list[ServiceHandle] = []
    for descriptor in descriptors:
        started_at = datetime.now(UTC)
        _start(descriptor, network=network, engine=engine, labels=labels or {})
        cleanup.register(
            f"remove service {descriptor.container_name}",
            lambda name=descriptor.container_name: engine.remove_container(name),
        )
        if descriptor.readiness is not None:
            _await_ready(descriptor, descriptor.readiness, probe_factory, readiness, sleep)
        LOGGER.debug("service %s ready", descriptor.container_name)
        handles.append(
            ServiceHandle(
                descriptor=descriptor,
                container_name=descriptor.container_name,
                ready=True,
                started_at=started_at,
            )
        )
    return handles


def plan_service_handles(descriptors: Sequence[ServiceDescriptor]) -> list[ServiceHandle]:
    """Handles for a dry run: nothing is started."""
    return [
        ServiceHandle(descriptor=descriptor, container_name=descriptor.container_name, ready=False)
        for descriptor in descriptors
    ]


def _start(
    descriptor: ServiceDescriptor,
    *,
    network: NetworkHandle,
    engine: ContainerEngine,
    labels: Mapping[str, str],
) -> None:
    spec = ContainerSpec(
        name=descriptor.container_name,
        image=descriptor.image,
        network=network.name,
        environment=descriptor.environment,
        labels=labels,
        tmpfs=descriptor.tmpfs,
    )
    try:
        engine.start_detached(spec)
    except ContainerEngineError as exc:
        raise ContainerStartError(
            f"Could not start service {descriptor.role} ({descriptor.container_name}): {exc}"
        ) from exc


def _await_ready(
    descriptor: ServiceDescriptor,
    target: ReadinessTarget,
    probe_factory: ProbeFactory,
    readiness: ReadinessSettings,
    sleep: Callable[[float], None],
) -> None:
    attempts = (
        readiness.http_attempts if isinstance(target, HttpTarget) else readiness.tcp_attempts
    )
    outcome = wait_until_ready(
        target,
        probe_factory(target),
        max_attempts=attempts,
        interval_seconds=readiness.interval_seconds,
        sleep=sleep,
    )
    if outcome is ProbeOutcome.TIMEOUT:
        raise ServiceNotReadyError(descriptor, attempts)
