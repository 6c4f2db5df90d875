"""
Structured logging utilities for the end-to-end harness.

Many tests share one process and run setup concurrently, so every record is
stamped with the id of the test that produced it. The id lives in a context
variable that the pytest plugin sets around each test.
"""

import json
import logging
from contextvars import ContextVar
from datetime import UTC, datetime

# Context variable holding the id of the test currently running in this thread
test_id: ContextVar[str] = ContextVar("test_id", default="")

# Logger for highlighted setup steps
STEP_LOGGER = "spinnaker_e2e.steps"


class TestIDFilter(logging.Filter):
    """Logging filter that adds the current test id to log records."""

    __test__ = False

    def filter(self, record: logging.LogRecord) -> bool:
        record.test_id = test_id.get() or "-"
        return True


class StructuredFormatter(logging.Formatter):
    """
    Structured JSON formatter for harness logs.

    Formats log records as one JSON object per line so CI logs from parallel
    test runs can be filtered per test.
    """

    structured_fields = (
        "step",
        "namespace",
        "operator_namespace",
        "kustomization_path",
        "cluster_mode",
    )

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "test_id": getattr(record, "test_id", ""),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for field in self.structured_fields:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data)


def set_test_id(value: str) -> str:
    """
    Set the test id for the current context.

    Args:
        value: Test id, usually the pytest node id

    Returns:
        The test id that was set
    """
    test_id.set(value)
    return value


def get_test_id() -> str:
    return test_id.get("")


def setup_structured_logging(
    log_level: str = "INFO", enable_json_formatting: bool = False
) -> None:
    """
    Set up logging for harness runs.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_json_formatting: Whether to use JSON formatting
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        if getattr(handler, "_spinnaker_e2e", False):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._spinnaker_e2e = True  # type: ignore[attr-defined]

    if enable_json_formatting:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(test_id)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)
    handler.addFilter(TestIDFilter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Third-party libraries are noisy at INFO
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def log_main_step(message: str, **fields) -> None:
    """Log a highlighted setup step, e.g. installing the operator."""
    logging.getLogger(STEP_LOGGER).info(
        f"=== {message}", extra={"step": message, **fields}
    )
