"""Result reporting exports."""

from .report_models import RunSummary, UnitStatus
from .summary_report import summarize

__all__ = [
    "RunSummary",
    "UnitStatus",
    "summarize",
]
