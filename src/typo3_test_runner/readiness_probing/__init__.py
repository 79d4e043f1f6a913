"""Readiness probing exports."""

from .probe_targets import HttpTarget, ProbeOutcome, ReadinessTarget, TcpTarget, status_below_400
from .readiness_prober import ContainerProbe, HostProbe, Probe, wait_until_ready

__all__ = [
    "ContainerProbe",
    "HostProbe",
    "HttpTarget",
    "Probe",
    "ProbeOutcome",
    "ReadinessTarget",
    "TcpTarget",
    "status_below_400",
    "wait_until_ready",
]
