"""Shared pytest fixtures for harness unit tests."""

import threading
import time

import pytest

from spinnaker_e2e import environment
from spinnaker_e2e.constants import (
    BUCKET_REGION_VAR,
    BUCKET_VAR,
    HALYARD_IMAGE_VAR,
    KUBECONFIG_VAR,
    OPERATOR_IMAGE_VAR,
)
from spinnaker_e2e.errors import GatewayError
from spinnaker_e2e.models import Defaults
from spinnaker_e2e.utils.result import Result


class RecordingGateway:
    """In-memory gateway that records every call.

    Operations listed in ``fail_on`` return a failed result. ``delay`` makes
    every call sleep, which widens race windows in concurrency tests.
    """

    def __init__(
        self,
        fail_on: tuple[str, ...] = (),
        delay: float = 0.0,
        pods: str = "spinnaker-operator-7d9f8c-x2x4q\n",
        responses: dict[str, str] | None = None,
        endpoints: tuple[str, str] = ("http://deck.test", "http://gate.test"),
    ):
        self.fail_on = set(fail_on)
        self.delay = delay
        self.pods = pods
        self.responses = responses or {}
        self.endpoints = endpoints
        self.calls: list[tuple] = []
        self._lock = threading.Lock()

    def _record(self, operation: str, *args) -> Result | None:
        with self._lock:
            self.calls.append((operation, *args))
        if self.delay:
            time.sleep(self.delay)
        if operation in self.fail_on:
            return Result.failure(GatewayError(operation, "simulated failure"))
        return None

    def count(self, operation: str) -> int:
        with self._lock:
            return sum(1 for call in self.calls if call[0] == operation)

    def args_of(self, operation: str) -> list[tuple]:
        with self._lock:
            return [call[1:] for call in self.calls if call[0] == operation]

    def operations(self) -> list[str]:
        with self._lock:
            return [call[0] for call in self.calls]

    def apply_manifest(self, namespace, path):
        return self._record("apply_manifest", namespace, path) or Result.success("")

    def apply_kustomize_overlay(self, namespace, path):
        return self._record("apply_kustomize_overlay", namespace, path) or (
            Result.success("")
        )

    def substitute_overlay_vars(self, path, variables, output_path=None):
        return self._record(
            "substitute_overlay_vars", path, variables, output_path
        ) or Result.success([])

    def remove_overlay(self, path):
        return self._record("remove_overlay", path) or Result.success()

    def create_namespace(self, name):
        return self._record("create_namespace", name) or Result.success(name)

    def delete_namespace(self, name):
        return self._record("delete_namespace", name) or Result.success()

    def wait_for_deployment_stable(self, namespace, deployment):
        return self._record("wait_for_deployment_stable", namespace, deployment) or (
            Result.success()
        )

    def run_command(self, args):
        failed = self._record("run_command", tuple(args))
        if failed is not None:
            return failed
        if "pods" in args:
            return Result.success(self.pods)
        return Result.success("")

    def http_get(self, url):
        failed = self._record("http_get", url)
        if failed is not None:
            return failed
        return Result.success(self.responses.get(url, "[]"))

    def deploy_spinnaker(self, namespace, overlay):
        return self._record("deploy_spinnaker", namespace, overlay) or (
            Result.success(self.endpoints)
        )


@pytest.fixture
def gateway():
    """Recording gateway shared by every environment created in a test."""
    return RecordingGateway()


@pytest.fixture
def gateway_factory(gateway):
    return lambda variables: gateway


@pytest.fixture
def defaults() -> Defaults:
    return Defaults(
        operator_image_default="armory/spinnaker-operator:dev",
        halyard_image_default="armory/halyard:operator-dev",
        bucket_default="spinnaker-e2e",
        bucket_region_default="us-west-2",
        crd_manifests="../deploy/crds",
        operator_kustomize_base="testdata/operator/base",
        kubeconfig_default="/tmp/e2e-kubeconfig",
    )


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Unset overrides and run from an empty directory so no .env is read."""
    for variable in (
        KUBECONFIG_VAR,
        OPERATOR_IMAGE_VAR,
        HALYARD_IMAGE_VAR,
        BUCKET_VAR,
        BUCKET_REGION_VAR,
    ):
        monkeypatch.delenv(variable, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def reset_shared_resources():
    """Each test starts with an uninitialized base environment and operator."""
    environment.base_environment.reset()
    environment.cluster_operator.reset()
    yield
    environment.base_environment.reset()
    environment.cluster_operator.reset()
