"""Run orchestration exports."""

from .run_contracts import RunOutcome
from .suite_run_use_case import EngineFactory, IdentityFactory, execute_suite_run

__all__ = [
    "EngineFactory",
    "IdentityFactory",
    "RunOutcome",
    "execute_suite_run",
]
