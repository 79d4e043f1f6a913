"""Run lifecycle exports."""

from .cleanup_coordinator import CleanupAction, CleanupCoordinator
from .interruption import RunInterrupted, interruption_guard
from .network_lifecycle import NetworkCreationError, NetworkHandle, create_network, destroy_network
from .run_identity import RunIdentity

__all__ = [
    "CleanupAction",
    "CleanupCoordinator",
    "NetworkCreationError",
    "NetworkHandle",
    "RunIdentity",
    "RunInterrupted",
    "create_network",
    "destroy_network",
    "interruption_guard",
]
