"""Logging for the end-to-end harness."""

from .logging import (
    StructuredFormatter,
    TestIDFilter,
    get_test_id,
    log_main_step,
    set_test_id,
    setup_structured_logging,
)

__all__ = [
    "StructuredFormatter",
    "TestIDFilter",
    "get_test_id",
    "log_main_step",
    "set_test_id",
    "setup_structured_logging",
]
