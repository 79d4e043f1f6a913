"""SIGINT/SIGTERM handling that tears the run down before exiting."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from .cleanup_coordinator import CleanupCoordinator

LOGGER = logging.getLogger("typo3_test_runner.interruption")

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class RunInterrupted(Exception):
    """Raised in the main thread after an interrupt signal triggered cleanup."""

    def __init__(self, signal_number: int) -> None:
        super().__init__(f"Interrupted by {signal.Signals(signal_number).name}")
        self.signal_number = signal_number


@contextmanager
def interruption_guard(
    cleanup: CleanupCoordinator,
    *,
    on_interrupt: Callable[[], None] | None = None,
) -> Iterator[None]:
    """Install interrupt handlers for the duration of a run.

    On SIGINT or SIGTERM `on_interrupt` runs first (used to stop parallel
    workers from picking up new work), then every cleanup action, then
    `RunInterrupted` is raised. Signals arriving while cleanup is already
    running are ignored. Handlers can only be installed from the main thread;
    elsewhere the guard is a no-op.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handle(signal_number: int, _frame: object) -> None:
        name = signal.Signals(signal_number).name
        if cleanup.closed:
            LOGGER.warning("Cleanup already in progress, ignoring %s", name)
            return
        LOGGER.warning("Received %s, cleaning up", name)
        if on_interrupt is not None:
            on_interrupt()
        cleanup.run_all()
        raise RunInterrupted(signal_number)

    previous = {number: signal.getsignal(number) for number in HANDLED_SIGNALS}
    for number in HANDLED_SIGNALS:
        signal.signal(number, _handle)
    try:
        yield
    finally:
        for number, handler in previous.items():
            signal.signal(number, handler)
