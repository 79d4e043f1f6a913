"""Service provisioning exports."""

from .provisioner import (
    ContainerStartError,
    ProbeFactory,
    ProvisionError,
    ServiceNotReadyError,
    plan_service_handles,
    provision_services,
)
from .service_catalog import SqliteStorage, plan_services, sqlite_storage
from .service_models import ServiceDescriptor, ServiceHandle

__all__ = [
    "ContainerStartError",
    "ProbeFactory",
    "ProvisionError",
    "ServiceDescriptor",
    "ServiceHandle",
    "ServiceNotReadyError",
    "SqliteStorage",
    "plan_service_handles",
    "plan_services",
    "provision_services",
    "sqlite_storage",
]
