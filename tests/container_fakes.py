"""In-memory stand-in for the docker/podman command line."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from typo3_test_runner.container_engine import CompletedCommand, ContainerEngine

_VALUE_OPTIONS = {
    "--name",
    "--network",
    "--label",
    "--add-host",
    "--user",
    "-v",
    "-w",
    "--tmpfs",
    "-e",
    "--pull",
}


@dataclass
class RunInvocation:
    """One parsed `run` command."""

    name: str
    image: str
    command: tuple[str, ...]
    network: str | None = None
    detached: bool = False
    labels: dict[str, str] = field(default_factory=dict)
    environment: dict[str, str] = field(default_factory=dict)
    tmpfs: list[str] = field(default_factory=list)
    volumes: list[str] = field(default_factory=list)
    options: list[str] = field(default_factory=list)


def _always_zero(_: RunInvocation) -> int:
    return 0


class FakeContainerRuntime:
    """Records every engine call and keeps track of networks and running containers."""

    def __init__(
        self,
        *,
        exit_code_for: Callable[[RunInvocation], int] = _always_zero,
        fail_network_create: bool = False,
        images: Sequence[str] = (),
        dangling_images: Sequence[str] = (),
        pull_exit_code: int = 0,
    ) -> None:
        self._lock = threading.Lock()
        self.exit_code_for = exit_code_for
        self.fail_network_create = fail_network_create
        self.images = list(images)
        self.dangling_images = list(dangling_images)
        self.pull_exit_code = pull_exit_code
        self.calls: list[tuple[str, ...]] = []
        self.runs: list[RunInvocation] = []
        self.networks: set[str] = set()
        self.containers: dict[str, RunInvocation] = {}
        self.removed_containers: list[str] = []
        self.removed_networks: list[str] = []
        self.on_run: Callable[[RunInvocation], None] | None = None

    def engine(self, binary: str = "docker") -> ContainerEngine:
        return ContainerEngine(binary, run_command=self)

    def __call__(self, argv: Sequence[str], capture: bool) -> CompletedCommand:
        command = tuple(argv)
        with self._lock:
            self.calls.append(command)
        handler = getattr(self, f"_handle_{command[1]}")
        return handler(command)

    @property
    def foreground_runs(self) -> list[RunInvocation]:
        return [run for run in self.runs if not run.detached]

    def containers_with_label(self, label: str) -> list[str]:
        with self._lock:
            snapshot = dict(self.containers)
        return _labelled(snapshot, label)

    def _handle_network(self, command: tuple[str, ...]) -> CompletedCommand:
        action, name = command[2], command[-1]
        if action == "create":
            if self.fail_network_create:
                return CompletedCommand(command, 1, stderr="network create refused")
            self.networks.add(name)
            return CompletedCommand(command, 0, stdout=f"{name}-id\n")
        if name not in self.networks:
            return CompletedCommand(command, 1, stderr=f"network {name} not found")
        self.networks.discard(name)
        self.removed_networks.append(name)
        return CompletedCommand(command, 0)

    def _handle_run(self, command: tuple[str, ...]) -> CompletedCommand:
        invocation = _parse_run(command)
        with self._lock:
            self.runs.append(invocation)
            self.containers[invocation.name] = invocation
        if self.on_run is not None:
            self.on_run(invocation)
        exit_code = self.exit_code_for(invocation)
        if invocation.detached and exit_code == 0:
            return CompletedCommand(command, 0, stdout=f"{invocation.name}-id\n")
        # foreground containers run with --rm and are gone once they exit
        with self._lock:
            self.containers.pop(invocation.name, None)
        output = f"output of {invocation.name}\n"
        return CompletedCommand(command, exit_code, stdout=output)

    def _handle_ps(self, command: tuple[str, ...]) -> CompletedCommand:
        with self._lock:
            snapshot = dict(self.containers)
        names = set(snapshot)
        for index, token in enumerate(command):
            if token != "--filter":
                continue
            kind, _, value = command[index + 1].partition("=")
            if kind == "label":
                names &= set(_labelled(snapshot, value))
            elif kind == "network":
                names &= {name for name, run in snapshot.items() if run.network == value}
        return CompletedCommand(command, 0, stdout="".join(f"{name}\n" for name in sorted(names)))

    def _handle_rm(self, command: tuple[str, ...]) -> CompletedCommand:
        name = command[-1]
        with self._lock:
            if self.containers.pop(name, None) is None:
                return CompletedCommand(command, 1, stderr=f"no such container {name}")
            self.removed_containers.append(name)
        return CompletedCommand(command, 0)

    def _handle_images(self, command: tuple[str, ...]) -> CompletedCommand:
        listed = self.dangling_images if "dangling=true" in command else self.images
        return CompletedCommand(command, 0, stdout="".join(f"{image}\n" for image in listed))

    def _handle_pull(self, command: tuple[str, ...]) -> CompletedCommand:
        return CompletedCommand(command, self.pull_exit_code)

    def _handle_rmi(self, command: tuple[str, ...]) -> CompletedCommand:
        return CompletedCommand(command, 0)


def _labelled(containers: dict[str, RunInvocation], label: str) -> list[str]:
    key, _, value = label.partition("=")
    return sorted(name for name, run in containers.items() if run.labels.get(key) == value)


def _parse_run(command: tuple[str, ...]) -> RunInvocation:
    values: dict[str, list[str]] = {}
    flags: list[str] = []
    index = 2
    while index < len(command):
        token = command[index]
        if token in _VALUE_OPTIONS:
            values.setdefault(token, []).append(command[index + 1])
            index += 2
            continue
        if token.startswith("-"):
            flags.append(token)
            index += 1
            continue
        break
    labels = dict(item.split("=", 1) for item in values.get("--label", []))
    environment = dict(item.split("=", 1) for item in values.get("-e", []))
    return RunInvocation(
        name=values["--name"][0],
        image=command[index],
        command=command[index + 1 :],
        network=values.get("--network", [None])[0],
        detached="-d" in flags,
        labels=labels,
        environment=environment,
        tmpfs=values.get("--tmpfs", []),
        volumes=values.get("-v", []),
        options=flags,
    )
