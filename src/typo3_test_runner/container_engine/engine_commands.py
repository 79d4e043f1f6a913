"""Thin wrapper around the docker/podman command line."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

LOGGER = logging.getLogger("typo3_test_runner.container_engine")

RUN_LABEL_KEY = "org.typo3-test-runner.run"


@dataclass(frozen=True)
class CompletedCommand:
    """Result of one engine invocation."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[[Sequence[str], bool], CompletedCommand]


class ContainerEngineError(Exception):
    """Raised when an engine command that must succeed fails."""


@dataclass(frozen=True)
class ContainerSpec:  # pylint: disable=too-many-instance-attributes
    """Everything needed to render one `run` invocation."""

    name: str
    image: str
    command: tuple[str, ...] = ()
    network: str | None = None
    environment: Mapping[str, str] = field(default_factory=dict)
    labels: Mapping[str, str] = field(default_factory=dict)
    tmpfs: tuple[str, ...] = ()
    volumes: tuple[str, ...] = ()
    working_directory: str | None = None
    user: str | None = None
    add_hosts: tuple[str, ...] = ()
    interactive: bool = False
    remove: bool = True
    extra_options: tuple[str, ...] = ()


def run_subprocess(argv: Sequence[str], capture: bool) -> CompletedCommand:
    """Run one engine command, streaming to the terminal unless `capture` is set."""
    command = tuple(argv)
    LOGGER.debug("exec: %s", shlex.join(command))
    try:
        completed = subprocess.run(
            list(command),
            check=False,
            capture_output=capture,
            text=True,
        )
    except FileNotFoundError as exc:
        raise ContainerEngineError(f"Command not found: {command[0]}") from exc
    return CompletedCommand(
        argv=command,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )


class ContainerEngine:
    """Engine capabilities used by the runner: networks, containers, images."""

    def __init__(self, binary: str, *, run_command: CommandRunner | None = None) -> None:
        self._binary = binary
        self._run_command = run_command or run_subprocess

    @property
    def binary(self) -> str:
        return self._binary

    @property
    def host_alias(self) -> str:
        """Host name under which containers reach the host machine."""
        if self._binary == "podman":
            return "host.containers.internal"
        return "host.docker.internal"

    def create_network(self, name: str, labels: Mapping[str, str] | None = None) -> None:
        argv = [self._binary, "network", "create"]
        argv.extend(_label_options(labels or {}))
        argv.append(name)
        self._checked(argv)

    def remove_network(self, name: str) -> None:
        self._checked([self._binary, "network", "rm", name])

    def build_run_argv(self, spec: ContainerSpec, *, detached: bool = False) -> tuple[str, ...]:
        """Render the `run` command line; deterministic for equal specs."""
        argv: list[str] = [self._binary, "run"]
        if spec.interactive and not detached:
            argv.extend(("-it", "--init"))
        argv.extend(spec.extra_options)
        if spec.remove:
            argv.append("--rm")
        if detached:
            argv.append("-d")
        argv.extend(("--name", spec.name))
        if spec.network:
            argv.extend(("--network", spec.network))
        for host in spec.add_hosts:
            argv.extend(("--add-host", host))
        if spec.user:
            argv.extend(("--user", spec.user))
        argv.extend(_label_options(spec.labels))
        for volume in spec.volumes:
            argv.extend(("-v", volume))
        if spec.working_directory:
            argv.extend(("-w", spec.working_directory))
        for mount in spec.tmpfs:
            argv.extend(("--tmpfs", mount))
        for key, value in spec.environment.items():
            argv.extend(("-e", f"{key}={value}"))
        argv.append(spec.image)
        argv.extend(spec.command)
        return tuple(argv)

    def start_detached(self, spec: ContainerSpec) -> str:
        """Start a background container and return its id."""
        completed = self._checked(self.build_run_argv(spec, detached=True))
        return completed.stdout.strip()

    def run(self, spec: ContainerSpec, *, capture: bool = False) -> CompletedCommand:
        """Run a container in the foreground and return its exit status."""
        return self._run_command(self.build_run_argv(spec), capture)

    def list_containers(
        self, *, label: str | None = None, network: str | None = None
    ) -> list[str]:
        argv = [self._binary, "ps", "-a"]
        if label:
            argv.extend(("--filter", f"label={label}"))
        if network:
            argv.extend(("--filter", f"network={network}"))
        argv.append("--format={{.Names}}")
        completed = self._checked(argv)
        return [line.strip() for line in completed.stdout.splitlines() if line.strip()]

    def remove_container(self, name: str) -> None:
        self._checked([self._binary, "rm", "-f", name])

    def list_images(self, reference: str, *, dangling: bool = False) -> list[str]:
        argv = [self._binary, "images", "--filter", f"reference={reference}"]
        if dangling:
            argv.extend(("--filter", "dangling=true", "--format", "{{.ID}}"))
        else:
            argv.extend(("--format", "{{.Repository}}:{{.Tag}}"))
        completed = self._checked(argv)
        return [line.strip() for line in completed.stdout.splitlines() if line.strip()]

    def pull_image(self, reference: str) -> CompletedCommand:
        return self._run_command((self._binary, "pull", reference), False)

    def remove_image(self, image_id: str) -> CompletedCommand:
        return self._run_command((self._binary, "rmi", "-f", image_id), True)

    def _checked(self, argv: Sequence[str]) -> CompletedCommand:
        completed = self._run_command(tuple(argv), True)
        if not completed.succeeded:
            detail = completed.stderr.strip() or completed.stdout.strip()
            raise ContainerEngineError(
                f"{shlex.join(completed.argv)} failed with exit code {completed.returncode}"
                + (f": {detail}" if detail else "")
            )
        return completed


def _label_options(labels: Mapping[str, str]) -> list[str]:
    options: list[str] = []
    for key, value in labels.items():
        options.extend(("--label", f"{key}={value}"))
    return options
