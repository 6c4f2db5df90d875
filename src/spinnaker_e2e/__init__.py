"""
Spinnaker Operator e2e harness - shared cluster environments for integration tests.

This package provides:
- Process-wide, thread-safe installation of the Spinnaker CRDs and base overlays
- Namespace-scoped and shared cluster-mode operator installations
- Spinnaker instance deployment and account verification
- Inline config file generation for Spinnaker overlays
"""

from .environment import (
    TestEnv,
    common_setup,
    install_crds_and_operator,
    install_operator,
)
from .models import Account, Defaults, Operator, Vars
from .spin_files import generate_spin_files
from .utils.result import Result
from .verification import verify_accounts_exist

__version__ = "0.1.0"

__all__ = [
    "Account",
    "Defaults",
    "Operator",
    "Result",
    "TestEnv",
    "Vars",
    "common_setup",
    "generate_spin_files",
    "install_crds_and_operator",
    "install_operator",
    "verify_accounts_exist",
]
