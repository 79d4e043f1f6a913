"""Turn a run configuration into concrete container invocations."""

from __future__ import annotations

from collections.abc import Sequence

from typo3_test_runner.container_engine import ContainerEngine, ContainerSpec
from typo3_test_runner.run_configuration import RunConfiguration
from typo3_test_runner.run_lifecycle import RunIdentity
from typo3_test_runner.service_provisioning import ServiceHandle, sqlite_storage
from typo3_test_runner.suite_catalog import (
    CommandContext,
    RuntimeImage,
    SuiteCommand,
    XdebugUse,
)

from .execution_models import ExecutionUnit

COMPOSER_CACHE_DIR = ".Build/.cache/composer"
DOCUMENTATION_MOUNT = "/project"
DOCUMENTATION_RUN_OPTIONS = ("--pull", "always")
XDEBUG_TRIGGER = "foo"


class UnitBuilder:
    """Builds `ExecutionUnit`s with the run's common container parameters."""

    def __init__(
        self,
        config: RunConfiguration,
        engine: ContainerEngine,
        identity: RunIdentity,
        *,
        network: str | None,
        services: Sequence[ServiceHandle] = (),
    ) -> None:
        self._config = config
        self._engine = engine
        self._identity = identity
        self._network = network
        self._services = tuple(services)

    def command_context(self, input_file: str | None = None) -> CommandContext:
        config = self._config
        return CommandContext(
            check_only=config.check_only or (config.dry_run and config.suite.supports_check_mode),
            dbms=config.database.engine,
            extra_arguments=config.extra_arguments,
            extra_test_options=config.extra_test_options,
            input_file=input_file,
        )

    def suite_command(self, input_file: str | None = None) -> SuiteCommand:
        return self._config.suite.command(self.command_context(input_file))

    def build_single(self) -> ExecutionUnit:
        command = self.suite_command()
        role = self._config.suite.name
        return ExecutionUnit(
            spec=self._spec(role, command, interactive=self._config.interactive),
        )

    def build_shard_units(self, input_files: Sequence[str]) -> list[ExecutionUnit]:
        """One unit per input file; output is captured, so no TTY is attached."""
        units = []
        for order, input_file in enumerate(input_files):
            command = self.suite_command(input_file)
            role = f"{self._config.suite.name}-{order}"
            units.append(
                ExecutionUnit(
                    spec=self._spec(role, command, interactive=False),
                    order=order,
                    input_file=input_file,
                )
            )
        return units

    def _spec(self, role: str, command: SuiteCommand, *, interactive: bool) -> ContainerSpec:
        config = self._config
        root = str(config.project_root)
        documentation = config.suite.runtime is RuntimeImage.DOCUMENTATION
        extra_options: list[str] = []
        if documentation:
            extra_options.extend(DOCUMENTATION_RUN_OPTIONS)
        if self._engine.binary == "podman":
            extra_options.extend(config.engine_run_options)
        storage = sqlite_storage(config)
        return ContainerSpec(
            name=self._identity.container_name(role),
            image=self._image(),
            command=self._argv(command),
            network=self._network,
            environment=self._environment(command),
            labels=self._identity.labels,
            tmpfs=storage.tmpfs if storage else (),
            volumes=(f"{root}:{DOCUMENTATION_MOUNT}" if documentation else f"{root}:{root}",),
            working_directory=None if documentation else root,
            user=self._user(),
            add_hosts=self._add_hosts(),
            interactive=interactive,
            extra_options=tuple(extra_options),
        )

    def _image(self) -> str:
        images = self._config.project.images
        runtime = self._config.suite.runtime
        if runtime is RuntimeImage.PLAYWRIGHT:
            return images.playwright
        if runtime is RuntimeImage.DOCUMENTATION:
            return images.documentation
        return images.php_image(self._config.php_version)

    def _argv(self, command: SuiteCommand) -> tuple[str, ...]:
        if not command.shell:
            return command.argv
        shell = "/bin/bash" if self._config.suite.runtime is RuntimeImage.PLAYWRIGHT else "/bin/sh"
        return (shell, "-c", " ".join(command.argv))

    def _user(self) -> str | None:
        config = self._config
        if self._engine.binary != "docker" or config.platform == "darwin":
            return None
        return None if config.host_uid is None else str(config.host_uid)

    def _add_hosts(self) -> tuple[str, ...]:
        if self._engine.binary != "docker":
            return ()
        return (f"{self._engine.host_alias}:host-gateway",)

    def _environment(self, command: SuiteCommand) -> dict[str, str]:
        config = self._config
        environment: dict[str, str] = {}
        environment.update(self._xdebug_environment())
        if command.composer_environment:
            environment["COMPOSER_CACHE_DIR"] = COMPOSER_CACHE_DIR
            environment["COMPOSER_ROOT_VERSION"] = config.project.composer_root_version
        storage = sqlite_storage(config)
        if storage is not None:
            environment.update(storage.environment)
        for service in self._services:
            environment.update(service.descriptor.connection_environment)
        if config.suite.runtime is RuntimeImage.PLAYWRIGHT:
            environment["TYPO3_BASE_URL"] = config.base_url or config.project.default_base_url
            environment["CI"] = "true" if config.ci else ""
            environment["npm_config_cache"] = f"{config.project_root}/.Build/.cache/npm"
            environment.update(config.pass_through_environment)
        return environment

    def _xdebug_environment(self) -> dict[str, str]:
        usage = self._config.suite.xdebug
        if usage is XdebugUse.COVERAGE:
            return {"XDEBUG_MODE": "coverage"}
        if usage is XdebugUse.NONE:
            return {}
        debug = self._config.debug
        if not debug.enabled:
            return {"XDEBUG_MODE": "off", "XDEBUG_CONFIG": " "}
        return {
            "XDEBUG_MODE": "debug",
            "XDEBUG_TRIGGER": XDEBUG_TRIGGER,
            "XDEBUG_CONFIG": f"client_port={debug.port} client_host={self._engine.host_alias}",
        }
