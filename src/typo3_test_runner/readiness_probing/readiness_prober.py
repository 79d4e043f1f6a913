"""Bounded readiness polling for TCP and HTTP endpoints."""

from __future__ import annotations

import logging
import shlex
import socket
import time
from collections.abc import Callable, Mapping
from typing import Protocol

import httpx

from typo3_test_runner.container_engine import ContainerEngine, ContainerSpec

from .probe_targets import (
    HttpTarget,
    ProbeOutcome,
    ReadinessTarget,
    TcpTarget,
    status_below_400,
)

LOGGER = logging.getLogger("typo3_test_runner.readiness")


class Probe(Protocol):  # pylint: disable=too-few-public-methods
    """One readiness attempt against a target."""

    def attempt(self, target: ReadinessTarget) -> bool: ...


def wait_until_ready(
    target: ReadinessTarget,
    probe: Probe,
    *,
    max_attempts: int,
    interval_seconds: float,
    sleep: Callable[[float], None] = time.sleep,
) -> ProbeOutcome:
    """Poll `target` up to `max_attempts` times, sleeping between attempts.

    Returns `ProbeOutcome.TIMEOUT` instead of raising when the budget runs out;
    the caller decides whether that is fatal.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1.")
    for attempt in range(1, max_attempts + 1):
        if probe.attempt(target):
            LOGGER.debug("%s ready after %d attempt(s)", target.describe(), attempt)
            return ProbeOutcome.READY
        if attempt < max_attempts:
            sleep(interval_seconds)
    LOGGER.debug("%s not ready after %d attempt(s)", target.describe(), max_attempts)
    return ProbeOutcome.TIMEOUT


class HostProbe:  # pylint: disable=too-few-public-methods
    """Probe endpoints reachable from the host running the tool."""

    def __init__(
        self,
        *,
        timeout_seconds: float = 1.0,
        verify_tls: bool = True,
        http_get: Callable[..., httpx.Response] | None = None,
        connect: Callable[..., socket.socket] | None = None,
    ) -> None:
        self._timeout = timeout_seconds
        self._verify_tls = verify_tls
        self._http_get = http_get or httpx.get
        self._connect = connect or socket.create_connection

    def attempt(self, target: ReadinessTarget) -> bool:
        if isinstance(target, TcpTarget):
            return self._attempt_tcp(target)
        return self._attempt_http(target)

    def _attempt_tcp(self, target: TcpTarget) -> bool:
        try:
            with self._connect((target.host, target.port), timeout=self._timeout):
                return True
        except OSError:
            return False

    def _attempt_http(self, target: HttpTarget) -> bool:
        try:
            response = self._http_get(
                target.url,
                timeout=self._timeout,
                verify=self._verify_tls,
                follow_redirects=True,
            )
        except httpx.HTTPError:
            return False
        if not target.accept(response.status_code):
            return False
        if target.json_field is None:
            return True
        try:
            payload = response.json()
        except ValueError:
            return False
        return isinstance(payload, dict) and target.json_field in payload


class ContainerProbe:  # pylint: disable=too-few-public-methods
    """Probe endpoints from inside the run network with a short-lived helper container.

    Service host names only resolve inside the run network, so each attempt
    starts `nc`/`wget` in a throwaway container attached to it. HTTP targets
    are judged by wget's exit status, which fails on 4xx/5xx responses, so
    targets with any other `accept` predicate are rejected.
    """

    def __init__(
        self,
        engine: ContainerEngine,
        *,
        network: str,
        image: str,
        container_name: str,
        labels: Mapping[str, str] | None = None,
        timeout_seconds: int = 1,
    ) -> None:
        self._engine = engine
        self._network = network
        self._image = image
        self._container_name = container_name
        self._labels = dict(labels or {})
        self._timeout = timeout_seconds

    def attempt(self, target: ReadinessTarget) -> bool:
        spec = ContainerSpec(
            name=self._container_name,
            image=self._image,
            command=("/bin/sh", "-c", self.probe_command(target)),
            network=self._network,
            labels=self._labels,
        )
        return self._engine.run(spec, capture=True).succeeded

    def probe_command(self, target: ReadinessTarget) -> str:
        if isinstance(target, TcpTarget):
            return shlex.join(
                ("nc", "-z", "-w", str(self._timeout), target.host, str(target.port))
            )
        if target.accept is not status_below_400:
            raise ValueError(
                f"Cannot probe {target.url} from inside the network: "
                "only the default status check is supported"
            )
        timeout = str(self._timeout)
        if target.json_field is None:
            return shlex.join(("wget", "-q", "-T", timeout, "--spider", target.url))
        fetch = shlex.join(("wget", "-q", "-T", timeout, "-O", "-", target.url))
        needle = shlex.quote('"' + target.json_field + '"')
        return f"{fetch} | grep -q {needle}"
