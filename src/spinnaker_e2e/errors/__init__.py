"""
Error handling module for the end-to-end harness.

This module provides the error hierarchy carried by failed results.
"""

from .harness_errors import (
    CommandError,
    ConfigurationError,
    GatewayError,
    HarnessError,
    HttpError,
    SetupError,
    SpinFilesError,
    VerificationError,
)

__all__ = [
    "HarnessError",
    "ConfigurationError",
    "GatewayError",
    "CommandError",
    "HttpError",
    "SetupError",
    "VerificationError",
    "SpinFilesError",
]
