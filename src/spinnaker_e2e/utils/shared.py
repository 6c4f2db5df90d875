"""
Lazily-initialized, lock-guarded process-wide resources.

A ``SharedResource`` wraps one expensive cluster-side setup (the base
environment, the cluster-mode operator) that must run at most once per test
process no matter how many test threads ask for it at the same time.

The first caller that finds no recorded outcome runs the setup while holding
the lock. Every other caller either finds the outcome already recorded or
blocks on the same lock until the first caller is done. Outcomes are only read
under the lock, so a caller that sees READY also sees everything the setup
applied.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import Generic, TypeVar

from spinnaker_e2e.utils.result import Result

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SharedState(str, Enum):
    """Lifecycle state of a shared resource."""

    UNINITIALIZED = "Uninitialized"
    READY = "Ready"
    FAILED = "Failed"


class SharedResource(Generic[T]):
    """
    Process-wide resource created on first use.

    Args:
        name: Name used in log messages
        poison_on_failure: Record a failed setup so later callers receive the
            same failure instead of re-running the setup
    """

    def __init__(self, name: str, poison_on_failure: bool = True):
        self.name = name
        self.poison_on_failure = poison_on_failure
        self._lock = threading.Lock()
        self._outcome: Result[T] | None = None

    def get_or_init(self, factory: Callable[[], Result[T]]) -> Result[T]:
        """
        Return the recorded outcome, running ``factory`` first if there is none.

        Exceptions raised by ``factory`` propagate and leave the resource
        uninitialized.
        """
        with self._lock:
            if self._outcome is not None:
                if self._outcome.ok:
                    logger.info(f"{self.name} already initialized")
                else:
                    logger.warning(
                        f"{self.name} initialization failed earlier: "
                        f"{self._outcome.error}"
                    )
                return self._outcome

            logger.info(f"Initializing {self.name}")
            outcome = factory()
            if outcome.ok:
                self._outcome = outcome
            elif self.poison_on_failure:
                logger.error(f"{self.name} initialization failed: {outcome.error}")
                self._outcome = outcome
            else:
                logger.error(
                    f"{self.name} initialization failed, next caller will retry: "
                    f"{outcome.error}"
                )
            return outcome

    @property
    def state(self) -> SharedState:
        with self._lock:
            if self._outcome is None:
                return SharedState.UNINITIALIZED
            return SharedState.READY if self._outcome.ok else SharedState.FAILED

    def reset(self) -> None:
        """Forget the recorded outcome. Cluster resources are left in place."""
        with self._lock:
            self._outcome = None
