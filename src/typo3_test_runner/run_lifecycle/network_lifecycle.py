"""Dedicated container network per run."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from typo3_test_runner.container_engine import ContainerEngine, ContainerEngineError

from .cleanup_coordinator import CleanupCoordinator
from .run_identity import RunIdentity

LOGGER = logging.getLogger("typo3_test_runner.network")


class NetworkCreationError(Exception):
    """Raised when the run network cannot be created."""


@dataclass(frozen=True)
class NetworkHandle:
    """The run network; `created` is False for planned (dry-run) networks."""

    name: str
    created: bool = True


def create_network(
    engine: ContainerEngine,
    identity: RunIdentity,
    cleanup: CleanupCoordinator,
) -> NetworkHandle:
    """Create the run network and register its teardown."""
    name = identity.network_name
    try:
        engine.create_network(name, labels=identity.labels)
    except ContainerEngineError as exc:
        raise NetworkCreationError(f"Could not create network {name}: {exc}") from exc
    LOGGER.debug("created network %s", name)
    handle = NetworkHandle(name=name)
    cleanup.register(
        f"remove network {name}",
        lambda: destroy_network(engine, handle, identity),
    )
    return handle


def destroy_network(engine: ContainerEngine, handle: NetworkHandle, identity: RunIdentity) -> None:
    """Remove every container of the run, then the network itself.

    Containers are found both by run label and by network membership so that
    anything attached to the network without a label is removed as well.
    """
    if not handle.created:
        return
    names = set(engine.list_containers(label=identity.label_filter))
    names.update(engine.list_containers(network=handle.name))
    for name in sorted(names):
        try:
            engine.remove_container(name)
        except ContainerEngineError as exc:
            LOGGER.warning("Could not remove container %s: %s", name, exc)
    engine.remove_network(handle.name)
    LOGGER.debug("removed network %s", handle.name)
