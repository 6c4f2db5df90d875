"""
Explicit success-or-failure values for harness operations.

Every public harness operation returns a ``Result`` instead of raising, so a
test can check ``result.ok`` before moving on to the next step and report
``result.error`` when it cannot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from spinnaker_e2e.errors import HarnessError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a fallible harness operation."""

    value: T | None = None
    error: HarnessError | None = None

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: HarnessError) -> Result[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """
        Return the carried value, raising the carried error on failure.

        Raises:
            HarnessError: If the result is a failure
        """
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
