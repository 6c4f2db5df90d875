"""Utilities shared by the harness: results, shared resources and the gateway."""

from .result import Result
from .shared import SharedResource, SharedState

__all__ = ["Result", "SharedResource", "SharedState"]
