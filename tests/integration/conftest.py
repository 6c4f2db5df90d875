"""
Pytest configuration and fixtures for integration tests.

These tests install the Spinnaker CRDs and operator into the cluster the
kubeconfig points at and deploy real Spinnaker instances. They only run when
SPINNAKER_E2E_INTEGRATION=1 is set; the overlays under testdata/ and the CRD
manifests must be reachable from the working directory.
"""

import os

import pytest

from spinnaker_e2e.models import Defaults
from spinnaker_e2e.observability import set_test_id, setup_structured_logging
from spinnaker_e2e.settings import HarnessSettings
from spinnaker_e2e.utils.naming import random_name

INTEGRATION_VAR = "SPINNAKER_E2E_INTEGRATION"


def pytest_collection_modifyitems(config, items):
    if os.environ.get(INTEGRATION_VAR) == "1":
        return
    skip = pytest.mark.skip(reason=f"set {INTEGRATION_VAR}=1 to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session", autouse=True)
def harness_logging():
    """Configure logging once for the whole run."""
    settings = HarnessSettings()
    setup_structured_logging(settings.log_level, settings.json_logs)


@pytest.fixture(autouse=True)
def current_test_id(request):
    """Stamp log records produced by a test with its node id."""
    set_test_id(request.node.nodeid)
    yield
    set_test_id("")


@pytest.fixture(scope="session")
def defaults() -> Defaults:
    """Defaults used when the environment does not override them."""
    return Defaults(
        operator_image_default="armory/spinnaker-operator:dev",
        halyard_image_default="armory/halyard:operator-dev",
        bucket_default="operator-e2e-tests",
        bucket_region_default="us-west-2",
        crd_manifests="../deploy/crds",
        operator_kustomize_base="testdata/operator/base",
    )


@pytest.fixture
def spin_namespace() -> str:
    """Unique namespace name for a Spinnaker instance."""
    return random_name("spin")
