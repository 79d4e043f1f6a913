"""Run orchestration use-case service."""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable

from typo3_test_runner.container_engine import ContainerEngine
from typo3_test_runner.readiness_probing import (
    ContainerProbe,
    HostProbe,
    HttpTarget,
    Probe,
    ProbeOutcome,
    wait_until_ready,
)
from typo3_test_runner.results_reporting import summarize
from typo3_test_runner.run_configuration import RunConfiguration
from typo3_test_runner.run_lifecycle import (
    CleanupCoordinator,
    NetworkHandle,
    RunIdentity,
    create_network,
    interruption_guard,
)
from typo3_test_runner.service_provisioning import (
    ProbeFactory,
    ServiceHandle,
    plan_service_handles,
    plan_services,
    provision_services,
)
from typo3_test_runner.suite_catalog import RuntimeImage
from typo3_test_runner.suite_execution import SuiteDispatcher

from .run_contracts import RunOutcome

LOGGER = logging.getLogger("typo3_test_runner.run")

EngineFactory = Callable[[str], ContainerEngine]
IdentityFactory = Callable[[str], RunIdentity]


def execute_suite_run(
    config: RunConfiguration,
    *,
    engine_factory: EngineFactory | None = None,
    identity_factory: IdentityFactory | None = None,
    probe_factory: ProbeFactory | None = None,
    base_url_probe: Probe | None = None,
    cpu_count: int | None = None,
    sleep: Callable[[float], None] | None = None,
) -> RunOutcome:
    """Execute one suite run: network, services, suite, summary, cleanup.

    Cleanup always runs before this returns or raises, including when the
    run is interrupted by SIGINT/SIGTERM.
    """
    engine = (engine_factory or ContainerEngine)(config.container_engine)
    identity = (identity_factory or RunIdentity.create)(config.project.network_prefix)
    stop_event = threading.Event()
    cleanup = CleanupCoordinator()

    with interruption_guard(cleanup, on_interrupt=stop_event.set), cleanup:
        network = _open_network(config, engine, identity, cleanup)
        services = _start_services(
            config,
            engine=engine,
            identity=identity,
            network=network,
            cleanup=cleanup,
            probe_factory=probe_factory,
            sleep=sleep,
        )
        if config.suite.runtime is RuntimeImage.PLAYWRIGHT and not config.dry_run:
            _warn_when_base_url_unreachable(config, base_url_probe or HostProbe(verify_tls=False))
        dispatcher = SuiteDispatcher(
            engine,
            identity,
            network=network.name if network else None,
            stop_event=stop_event,
            cpu_count=cpu_count if cpu_count is not None else os.cpu_count(),
        )
        results = dispatcher.dispatch(config, services)

    return RunOutcome(
        summary=summarize(results, config),
        results=tuple(results),
        identity=identity,
        services=tuple(services),
        network_name=network.name if network and network.created else None,
    )


def _open_network(
    config: RunConfiguration,
    engine: ContainerEngine,
    identity: RunIdentity,
    cleanup: CleanupCoordinator,
) -> NetworkHandle | None:
    if not config.suite.needs_containers:
        return None
    if config.dry_run:
        return NetworkHandle(name=identity.network_name, created=False)
    return create_network(engine, identity, cleanup)


def _start_services(
    config: RunConfiguration,
    *,
    engine: ContainerEngine,
    identity: RunIdentity,
    network: NetworkHandle | None,
    cleanup: CleanupCoordinator,
    probe_factory: ProbeFactory | None,
    sleep: Callable[[float], None] | None,
) -> list[ServiceHandle]:
    if network is None:
        return []
    descriptors = plan_services(config, identity)
    if config.dry_run or not descriptors:
        return plan_service_handles(descriptors)
    factory = probe_factory or _container_probe_factory(config, engine, identity, network)
    return provision_services(
        descriptors,
        network=network,
        engine=engine,
        cleanup=cleanup,
        probe_factory=factory,
        readiness=config.project.readiness,
        labels=identity.labels,
        sleep=sleep or time.sleep,
    )


def _container_probe_factory(
    config: RunConfiguration,
    engine: ContainerEngine,
    identity: RunIdentity,
    network: NetworkHandle,
) -> ProbeFactory:
    probe = ContainerProbe(
        engine,
        network=network.name,
        image=config.project.images.alpine,
        container_name=identity.container_name("wait-for"),
        labels=identity.labels,
    )
    return lambda _target: probe


def _warn_when_base_url_unreachable(config: RunConfiguration, probe: Probe) -> None:
    base_url = config.base_url or config.project.default_base_url
    outcome = wait_until_ready(HttpTarget(url=base_url), probe, max_attempts=1, interval_seconds=0)
    if outcome is ProbeOutcome.TIMEOUT:
        LOGGER.warning(
            "No TYPO3 instance answered at %s. E2E tests require a running TYPO3 instance; "
            "start ddev or set TYPO3_BASE_URL.",
            base_url,
        )
