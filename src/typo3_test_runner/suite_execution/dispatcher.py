"""Execution dispatcher: single, sharded and host strategies."""

from __future__ import annotations

import logging
import shlex
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait

from typo3_test_runner.container_engine import ContainerEngine
from typo3_test_runner.run_configuration import RunConfiguration
from typo3_test_runner.run_lifecycle import RunIdentity
from typo3_test_runner.service_provisioning import ServiceHandle, sqlite_storage
from typo3_test_runner.suite_catalog import (
    CommandContext,
    ExecutionStrategy,
    HostPreparation,
    RuntimeImage,
    SuiteId,
)

from .execution_models import ExecutionResult, ExecutionUnit
from .host_actions import (
    create_project_directory,
    ensure_node_modules_writable,
    prepare_host,
    remove_project_path,
    update_images,
)
from .sharding import compute_worker_count, discover_shard_inputs, partition_into_shards
from .unit_builder import UnitBuilder

LOGGER = logging.getLogger("typo3_test_runner.dispatch")


class SuiteDispatcher:
    """Runs the selected suite and returns one result per unit, in submission order."""

    def __init__(
        self,
        engine: ContainerEngine,
        identity: RunIdentity,
        *,
        network: str | None,
        stop_event: threading.Event | None = None,
        cpu_count: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._engine = engine
        self._identity = identity
        self._network = network
        self._stop = stop_event or threading.Event()
        self._cpu_count = cpu_count
        self._clock = clock

    @property
    def stop_event(self) -> threading.Event:
        return self._stop

    def dispatch(
        self, config: RunConfiguration, services: Sequence[ServiceHandle] = ()
    ) -> list[ExecutionResult]:
        strategy = config.suite.strategy
        if strategy is ExecutionStrategy.HOST:
            return [self._run_host_action(config)]
        builder = UnitBuilder(
            config, self._engine, self._identity, network=self._network, services=services
        )
        if strategy is ExecutionStrategy.SINGLE:
            return [self._run_single(config, builder)]
        if strategy is ExecutionStrategy.SHARDED:
            return self._run_sharded(config, builder)
        raise ValueError(f"Unsupported execution strategy: {strategy}")

    def _run_single(self, config: RunConfiguration, builder: UnitBuilder) -> ExecutionResult:
        unit = builder.build_single()
        if config.dry_run:
            return self._rendered(config, unit)
        self._prepare(config, builder.suite_command().preparation)
        started = self._clock()
        completed = self._engine.run(unit.spec, capture=False)
        return ExecutionResult(
            suite=config.suite.name,
            unit_name=unit.name,
            exit_code=completed.returncode,
            duration_seconds=self._clock() - started,
        )

    def _run_sharded(self, config: RunConfiguration, builder: UnitBuilder) -> list[ExecutionResult]:
        input_files = discover_shard_inputs(config.project_root)
        if not input_files:
            LOGGER.warning("No functional test files found below %s", config.project_root)
            return [
                ExecutionResult(suite=config.suite.name, unit_name=config.suite.name, exit_code=0)
            ]

        units = builder.build_shard_units(input_files)
        if config.dry_run:
            return [self._rendered(config, unit) for unit in units]
        self._prepare(config, builder.suite_command(input_files[0]).preparation)

        workers = compute_worker_count(
            explicit=config.workers,
            ci=config.ci_declared,
            ci_workers=config.project.ci_workers,
            cpu_count=self._cpu_count,
        )
        shards = partition_into_shards(units, workers)
        LOGGER.debug("running %d files in %d shard(s)", len(units), len(shards))

        results: list[ExecutionResult] = []
        executor = ThreadPoolExecutor(max_workers=len(shards), thread_name_prefix="shard")
        try:
            futures = [executor.submit(self._run_shard, config, shard) for shard in shards]
            wait(futures)
            for future in futures:
                results.extend(future.result())
        except Exception:
            self._stop.set()
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return sorted(results, key=lambda result: result.order)

    def _run_shard(
        self, config: RunConfiguration, shard: Sequence[ExecutionUnit]
    ) -> list[ExecutionResult]:
        results = []
        for unit in shard:
            if self._stop.is_set():
                break
            started = self._clock()
            completed = self._engine.run(unit.spec, capture=True)
            results.append(
                ExecutionResult(
                    suite=config.suite.name,
                    unit_name=unit.name,
                    exit_code=completed.returncode,
                    duration_seconds=self._clock() - started,
                    input_file=unit.input_file,
                    output=completed.stdout + completed.stderr,
                    order=unit.order,
                )
            )
        return results

    def _run_host_action(self, config: RunConfiguration) -> ExecutionResult:
        suite = config.suite
        command = suite.command(CommandContext())
        if suite.suite_id is SuiteId.IMAGE_UPDATE:
            prefix = config.project.images.php_image_prefix
            if config.dry_run:
                rendered = shlex.join((self._engine.binary, "images", f"{prefix}*"))
                return ExecutionResult(suite.name, suite.name, 0, rendered_command=rendered)
            started = self._clock()
            exit_code = update_images(self._engine, prefix)
            return ExecutionResult(
                suite.name, suite.name, exit_code, duration_seconds=self._clock() - started
            )

        paths = command.preparation.remove_paths
        if config.dry_run:
            return ExecutionResult(
                suite.name, suite.name, 0, rendered_command=shlex.join(("rm", "-rf", *paths))
            )
        started = self._clock()
        for relative in paths:
            remove_project_path(config.project_root, relative)
        return ExecutionResult(
            suite.name, suite.name, 0, duration_seconds=self._clock() - started
        )

    def _prepare(self, config: RunConfiguration, preparation: HostPreparation) -> None:
        if config.suite.runtime is RuntimeImage.PLAYWRIGHT:
            ensure_node_modules_writable(config.project_root)
        prepare_host(config.project_root, preparation)
        storage = sqlite_storage(config)
        if storage is not None:
            create_project_directory(config.project_root, storage.host_directory)

    def _rendered(self, config: RunConfiguration, unit: ExecutionUnit) -> ExecutionResult:
        return ExecutionResult(
            suite=config.suite.name,
            unit_name=unit.name,
            exit_code=0,
            input_file=unit.input_file,
            rendered_command=shlex.join(self._engine.build_run_argv(unit.spec)),
            order=unit.order,
        )
