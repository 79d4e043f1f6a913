"""Suite execution exports."""

from .dispatcher import SuiteDispatcher
from .execution_models import ExecutionResult, ExecutionUnit
from .host_actions import HostPreparationError, prepare_host, update_images
from .sharding import compute_worker_count, discover_shard_inputs, partition_into_shards
from .unit_builder import UnitBuilder

__all__ = [
    "ExecutionResult",
    "ExecutionUnit",
    "HostPreparationError",
    "SuiteDispatcher",
    "UnitBuilder",
    "compute_worker_count",
    "discover_shard_inputs",
    "partition_into_shards",
    "prepare_host",
    "update_images",
]
