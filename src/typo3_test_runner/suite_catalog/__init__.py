"""Suite catalog exports."""

from .command_templates import SUITE_CATALOG, lookup_suite
from .suite_definitions import (
    SUITE_ALIASES,
    CommandContext,
    DatabaseSupport,
    ExecutionStrategy,
    HostPreparation,
    RuntimeImage,
    SuiteCommand,
    SuiteDefinition,
    SuiteId,
    XdebugUse,
)

__all__ = [
    "SUITE_ALIASES",
    "SUITE_CATALOG",
    "CommandContext",
    "DatabaseSupport",
    "ExecutionStrategy",
    "HostPreparation",
    "RuntimeImage",
    "SuiteCommand",
    "SuiteDefinition",
    "SuiteId",
    "XdebugUse",
    "lookup_suite",
]
