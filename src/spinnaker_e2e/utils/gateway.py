"""
Command and manifest gateway.

The harness never talks to a cluster directly. Everything it does against the
cluster goes through a ``ManifestGateway``: applying manifests and overlays,
creating and deleting namespaces, waiting for deployments, running ``kubectl``
queries, and reading HTTP endpoints of deployed instances. Every call returns
a ``Result`` and a failed result is fatal for the operation that made it.

``KubectlGateway`` is the implementation used against real clusters. Apply
and query commands go through ``kubectl`` so that kustomize overlays are
handled exactly as a user would apply them; namespace management and
readiness polling use the Kubernetes API client.
"""

import logging
import shutil
import subprocess
import threading
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Protocol

import httpx
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError as TransportError

from spinnaker_e2e.constants import (
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SPINNAKER_TIMEOUT,
    DEFAULT_WAIT_TIMEOUT,
    NAMESPACE_LABELS,
    SPINNAKER_GROUP,
    SPINNAKER_PLURAL,
    SPINNAKER_SERVICE_NAME,
    SPINNAKER_STATUS_OK,
    SPINNAKER_VERSION,
)
from spinnaker_e2e.errors import CommandError, GatewayError, HttpError
from spinnaker_e2e.models import Vars
from spinnaker_e2e.utils.result import Result
from spinnaker_e2e.utils.templating import OverlayTemplating, TemplateError

logger = logging.getLogger(__name__)

# Failures of the Kubernetes API client, including unreachable API servers
KUBERNETES_ERRORS = (ApiException, ConfigException, TransportError)


class TemplateVariables(Protocol):
    def template_context(self) -> dict[str, Any]: ...


class ManifestGateway(Protocol):
    """Operations the harness performs against a cluster."""

    def apply_manifest(self, namespace: str, path: str) -> Result[str]: ...

    def apply_kustomize_overlay(self, namespace: str, path: str) -> Result[str]: ...

    def substitute_overlay_vars(
        self,
        path: str,
        variables: TemplateVariables,
        output_path: str | None = None,
    ) -> Result[list[Path]]: ...

    def remove_overlay(self, path: str) -> Result[None]: ...

    def create_namespace(self, name: str) -> Result[str]: ...

    def delete_namespace(self, name: str) -> Result[None]: ...

    def wait_for_deployment_stable(
        self, namespace: str, deployment: str
    ) -> Result[None]: ...

    def run_command(self, args: Sequence[str]) -> Result[str]: ...

    def http_get(self, url: str) -> Result[str]: ...

    def deploy_spinnaker(
        self, namespace: str, overlay: str
    ) -> Result[tuple[str, str]]: ...


class KubectlGateway:
    """Gateway backed by ``kubectl``, the Kubernetes API client and httpx."""

    def __init__(
        self,
        variables: Vars,
        wait_timeout: int = DEFAULT_WAIT_TIMEOUT,
        spinnaker_timeout: int = DEFAULT_SPINNAKER_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        http_timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        """
        Initialize the gateway.

        Args:
            variables: Resolved variables, the kubeconfig is taken from them
            wait_timeout: Maximum seconds to wait for a deployment to stabilize
            spinnaker_timeout: Maximum seconds to wait for a SpinnakerService
            poll_interval: Seconds between readiness checks
            http_timeout: Timeout in seconds for HTTP requests
        """
        self.variables = variables
        self.kubeconfig = variables.kubeconfig
        self.wait_timeout = wait_timeout
        self.spinnaker_timeout = spinnaker_timeout
        self.poll_interval = poll_interval
        self.http_timeout = http_timeout
        self._api_client: client.ApiClient | None = None
        self._api_lock = threading.Lock()

    @property
    def api_client(self) -> client.ApiClient:
        """Kubernetes API client, created from the kubeconfig on first use."""
        with self._api_lock:
            if self._api_client is None:
                self._api_client = config.new_client_from_config(
                    config_file=self.kubeconfig
                )
            return self._api_client

    # Commands

    def run_command(self, args: Sequence[str]) -> Result[str]:
        command = " ".join(args)
        logger.debug(f"Running {command}")
        try:
            completed = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                timeout=self.wait_timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            return Result.failure(CommandError(command, None, str(e), cause=e))

        if completed.returncode != 0:
            return Result.failure(
                CommandError(
                    command,
                    completed.returncode,
                    completed.stderr or completed.stdout,
                )
            )
        return Result.success(completed.stdout)

    def kubectl(self, *args: str) -> Result[str]:
        return self.run_command([*self.variables.kubectl_prefix(), *args])

    def apply_manifest(self, namespace: str, path: str) -> Result[str]:
        return self.kubectl("-n", namespace, "apply", "-f", path)

    def apply_kustomize_overlay(self, namespace: str, path: str) -> Result[str]:
        return self.kubectl("-n", namespace, "apply", "-k", path)

    def substitute_overlay_vars(
        self,
        path: str,
        variables: TemplateVariables,
        output_path: str | None = None,
    ) -> Result[list[Path]]:
        try:
            written = OverlayTemplating(path).render(
                variables.template_context(), output_path
            )
        except (OSError, TemplateError) as e:
            return Result.failure(
                GatewayError(f"substitute overlay vars in {path}", str(e), cause=e)
            )
        return Result.success(written)

    def remove_overlay(self, path: str) -> Result[None]:
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            return Result.success()
        except OSError as e:
            return Result.failure(
                GatewayError(f"remove overlay {path}", str(e), cause=e)
            )
        logger.debug(f"Removed rendered overlay {path}")
        return Result.success()

    # Namespaces

    def create_namespace(self, name: str) -> Result[str]:
        namespace = client.V1Namespace(
            metadata=client.V1ObjectMeta(name=name, labels=dict(NAMESPACE_LABELS))
        )
        try:
            client.CoreV1Api(self.api_client).create_namespace(namespace)
        except KUBERNETES_ERRORS as e:
            return Result.failure(
                GatewayError(f"create namespace {name}", str(e), cause=e)
            )
        logger.info(f"Created namespace {name}")
        return Result.success(name)

    def delete_namespace(self, name: str) -> Result[None]:
        try:
            client.CoreV1Api(self.api_client).delete_namespace(
                name=name,
                body=client.V1DeleteOptions(propagation_policy="Foreground"),
            )
        except ApiException as e:
            if e.status == 404:
                logger.warning(f"Namespace {name} already deleted")
                return Result.success()
            return Result.failure(
                GatewayError(f"delete namespace {name}", str(e), cause=e)
            )
        except (ConfigException, TransportError) as e:
            return Result.failure(
                GatewayError(f"delete namespace {name}", str(e), cause=e)
            )
        logger.info(f"Deleted namespace {name}")
        return Result.success()

    # Waiting

    def _wait_for(
        self, condition: Callable[[], bool], timeout: float, description: str
    ) -> bool:
        start_time = time.monotonic()
        while time.monotonic() - start_time < timeout:
            try:
                if condition():
                    return True
            except (ApiException, TransportError) as e:
                logger.debug(f"Condition check for '{description}' failed: {e}")
            time.sleep(self.poll_interval)

        logger.warning(f"Timeout waiting for {description} after {timeout}s")
        return False

    def wait_for_deployment_stable(
        self, namespace: str, deployment: str
    ) -> Result[None]:
        try:
            apps_v1 = client.AppsV1Api(self.api_client)
        except ConfigException as e:
            return Result.failure(
                GatewayError(f"wait for deployment {deployment}", str(e), cause=e)
            )

        def check_deployment() -> bool:
            current = apps_v1.read_namespaced_deployment(
                name=deployment, namespace=namespace
            )
            desired = 1 if current.spec.replicas is None else current.spec.replicas
            ready = current.status.ready_replicas or 0
            return ready == desired

        description = f"deployment {deployment} in {namespace}"
        if not self._wait_for(check_deployment, self.wait_timeout, description):
            return Result.failure(
                GatewayError(
                    f"wait for {description}",
                    f"not ready after {self.wait_timeout}s",
                )
            )
        logger.info(f"Deployment {deployment} in {namespace} is ready")
        return Result.success()

    # Spinnaker

    def deploy_spinnaker(self, namespace: str, overlay: str) -> Result[tuple[str, str]]:
        """
        Apply a Spinnaker overlay and wait for the SpinnakerService to report OK.

        Returns:
            Result carrying the (deck, gate) URLs reported in the service status
        """
        applied = self.apply_kustomize_overlay(namespace, overlay)
        if not applied.ok:
            return Result.failure(applied.error)

        try:
            custom_objects = client.CustomObjectsApi(self.api_client)
        except ConfigException as e:
            return Result.failure(
                GatewayError(f"deploy spinnaker in {namespace}", str(e), cause=e)
            )

        status: dict[str, Any] = {}

        def spinnaker_ready() -> bool:
            nonlocal status
            service = custom_objects.get_namespaced_custom_object(
                group=SPINNAKER_GROUP,
                version=SPINNAKER_VERSION,
                namespace=namespace,
                plural=SPINNAKER_PLURAL,
                name=SPINNAKER_SERVICE_NAME,
            )
            status = service.get("status", {}) or {}
            return status.get("status") == SPINNAKER_STATUS_OK

        description = f"spinnakerservice {SPINNAKER_SERVICE_NAME} in {namespace}"
        if not self._wait_for(spinnaker_ready, self.spinnaker_timeout, description):
            return Result.failure(
                GatewayError(
                    f"deploy spinnaker in {namespace}",
                    f"not ready after {self.spinnaker_timeout}s "
                    f"(status: {status.get('status')})",
                )
            )
        return Result.success((status.get("uiUrl", ""), status.get("apiUrl", "")))

    # HTTP

    def http_get(self, url: str) -> Result[str]:
        logger.debug(f"GET {url}")
        try:
            response = httpx.get(url, timeout=self.http_timeout)
        except httpx.HTTPError as e:
            return Result.failure(HttpError(url, str(e), cause=e))

        if response.status_code != 200:
            return Result.failure(
                HttpError(url, response.text[:200], status_code=response.status_code)
            )
        return Result.success(response.text)
