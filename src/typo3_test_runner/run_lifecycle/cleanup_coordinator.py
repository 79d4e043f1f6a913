"""Ordered, idempotent teardown of run resources."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

LOGGER = logging.getLogger("typo3_test_runner.cleanup")

CleanupAction = Callable[[], None]


@dataclass(frozen=True)
class _Registration:
    description: str
    action: CleanupAction


class CleanupCoordinator:
    """Runs registered cleanup actions exactly once, newest first.

    A failing action is logged and the remaining actions still run. Actions
    registered after `run_all` has completed are executed immediately so late
    starters cannot leak.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._registrations: list[_Registration] = []
        self._done = False

    def __enter__(self) -> CleanupCoordinator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.run_all()

    @property
    def closed(self) -> bool:
        """True once `run_all` has started."""
        with self._lock:
            return self._done

    def register(self, description: str, action: CleanupAction) -> None:
        with self._lock:
            if not self._done:
                self._registrations.append(_Registration(description, action))
                return
        LOGGER.debug("cleanup already ran, executing %s immediately", description)
        _execute(_Registration(description, action))

    def run_all(self) -> None:
        with self._lock:
            if self._done:
                return
            self._done = True
            pending = list(reversed(self._registrations))
            self._registrations.clear()
        for registration in pending:
            _execute(registration)


def _execute(registration: _Registration) -> None:
    LOGGER.debug("cleanup: %s", registration.description)
    try:
        registration.action()
    except Exception as exc:  # pylint: disable=broad-exception-caught
        LOGGER.warning("Cleanup step '%s' failed: %s", registration.description, exc)
