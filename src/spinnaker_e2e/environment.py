"""
Shared test environment lifecycle.

A test run installs the Spinnaker CRDs and renders the base overlays once per
process, and installs at most one cluster-mode operator per process. Every
test gets its own ``TestEnv`` view on top of that: a copy of the resolved
variables, the operator it uses, and the endpoints of the Spinnaker instance
it deployed.

Typical use from a test::

    env = install_crds_and_operator("spin-ns", False, DEFAULTS).unwrap()
    try:
        env.install_spinnaker("spin-ns", "testdata/spinnaker/overlay_accounts").unwrap()
        env.verify_accounts_exist("/credentials", Account(name="aws1", type="aws"))
    finally:
        env.cleanup()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from spinnaker_e2e.constants import (
    CRD_NAMESPACE,
    CRD_RESOURCES,
    OPERATOR_DEPLOYMENT,
    OPERATOR_NAMESPACE_PREFIX,
    OPERATOR_OVERLAY_BASIC_MODE,
    OPERATOR_OVERLAY_CLUSTER_MODE,
)
from spinnaker_e2e.errors import SetupError
from spinnaker_e2e.models import Account, Defaults, Operator, Vars
from spinnaker_e2e.observability import log_main_step
from spinnaker_e2e.settings import resolve_vars
from spinnaker_e2e.utils.gateway import KubectlGateway, ManifestGateway
from spinnaker_e2e.utils.naming import random_name
from spinnaker_e2e.utils.result import Result
from spinnaker_e2e.utils.shared import SharedResource
from spinnaker_e2e.utils.templating import rendered_overlay_path
from spinnaker_e2e.verification import verify_accounts_exist

logger = logging.getLogger(__name__)

GatewayFactory = Callable[[Vars], ManifestGateway]

# Process-wide resources, never torn down by a test
base_environment: SharedResource[Vars] = SharedResource("base environment")
cluster_operator: SharedResource[Operator] = SharedResource("cluster mode operator")


@dataclass
class TestEnv:
    """Environment view owned by a single test."""

    __test__ = False

    vars: Vars
    gateway: ManifestGateway
    operator: Operator | None = None
    operator_shared: bool = False
    spin_deck_url: str = ""
    spin_gate_url: str = ""

    def kubectl_prefix(self) -> list[str]:
        return self.vars.kubectl_prefix()

    def install_spinnaker(self, namespace: str, overlay: str) -> Result[TestEnv]:
        """
        Deploy a Spinnaker instance into ``namespace`` and record its endpoints.

        The namespace is created here and belongs to the caller, who deletes it.
        """
        log_main_step(
            f"Installing spinnaker in namespace {namespace}", namespace=namespace
        )
        created = self.gateway.create_namespace(namespace)
        if not created.ok:
            return Result.failure(created.error)

        deployed = self.gateway.deploy_spinnaker(namespace, overlay)
        if not deployed.ok:
            return Result.failure(deployed.error)

        self.spin_deck_url, self.spin_gate_url = deployed.value
        log_main_step("Spinnaker installed successfully", namespace=namespace)
        return Result.success(self)

    def verify_accounts_exist(self, endpoint: str, *accounts: Account) -> Result[int]:
        return verify_accounts_exist(
            self.gateway, self.spin_gate_url, endpoint, *accounts
        )

    def delete_operator(self) -> Result[None]:
        """
        Delete this test's operator namespace and its rendered overlay.

        Shared operators are kept.
        """
        if self.operator is None or not self.operator.namespace:
            return Result.success()
        if self.operator_shared:
            logger.info(
                f"Keeping shared operator in namespace {self.operator.namespace}"
            )
            return Result.success()
        logger.info(f"Deleting operator in namespace {self.operator.namespace}")
        deleted = self.gateway.delete_namespace(self.operator.namespace)
        if not deleted.ok or not self.operator.overlay_path:
            return deleted
        return self.gateway.remove_overlay(self.operator.overlay_path)

    def cleanup(self) -> Result[None]:
        return self.delete_operator()


def install_crds(
    defaults: Defaults, gateway: ManifestGateway, variables: Vars
) -> Result[None]:
    """Apply the CRD manifests and check that the API server serves them."""
    applied = gateway.apply_manifest(CRD_NAMESPACE, defaults.crd_manifests)
    if not applied.ok:
        return Result.failure(applied.error)

    for resource in CRD_RESOURCES:
        listed = gateway.run_command([*variables.kubectl_prefix(), "get", resource])
        if not listed.ok:
            return Result.failure(listed.error)
    return Result.success()


def _setup_base_environment(
    defaults: Defaults, gateway_factory: GatewayFactory
) -> Result[Vars]:
    resolved = resolve_vars(defaults)
    if not resolved.ok:
        return resolved
    variables = resolved.value
    gateway = gateway_factory(variables)

    steps: list[tuple[str, Callable[[], Result]]] = [
        (
            f"render operator base overlay {defaults.operator_kustomize_base}",
            lambda: gateway.substitute_overlay_vars(
                defaults.operator_kustomize_base, variables
            ),
        ),
        ("install CRDs", lambda: install_crds(defaults, gateway, variables)),
        (
            f"render spinnaker base overlay {defaults.spinnaker_kustomize_base}",
            lambda: gateway.substitute_overlay_vars(
                defaults.spinnaker_kustomize_base, variables
            ),
        ),
    ]
    for description, step in steps:
        outcome = step()
        if not outcome.ok:
            return Result.failure(
                SetupError(
                    f"Base environment setup failed to {description}: {outcome.error}",
                    cause=outcome.error,
                )
            )
    return Result.success(variables)


def common_setup(
    defaults: Defaults, gateway_factory: GatewayFactory = KubectlGateway
) -> Result[TestEnv]:
    """
    Return a new per-test view of the base environment.

    The first caller in the process sets the base environment up; concurrent
    callers wait for it and then share the outcome.
    """
    shared = base_environment.get_or_init(
        lambda: _setup_base_environment(defaults, gateway_factory)
    )
    if not shared.ok:
        return Result.failure(shared.error)
    return Result.success(
        TestEnv(vars=shared.value, gateway=gateway_factory(shared.value))
    )


def _find_operator_pod(output: str) -> str:
    for line in output.splitlines():
        name = line.strip()
        if name.startswith(OPERATOR_DEPLOYMENT):
            return name
    return ""


def install_operator(env: TestEnv, cluster_mode: bool) -> Result[Operator]:
    """
    Install an operator into a fresh namespace and wait for its pod.

    Args:
        env: Environment of the requesting test
        cluster_mode: Install the cluster-scoped operator overlay

    Returns:
        Result carrying the installed operator
    """
    overlay = (
        OPERATOR_OVERLAY_CLUSTER_MODE if cluster_mode else OPERATOR_OVERLAY_BASIC_MODE
    )
    namespace = random_name(OPERATOR_NAMESPACE_PREFIX)
    operator = Operator(
        kustomization_path=overlay,
        namespace=namespace,
        overlay_path=rendered_overlay_path(overlay, namespace),
    )
    gateway = env.gateway
    log_main_step(
        f"Installing CRDs and operator in namespace {operator.namespace}",
        operator_namespace=operator.namespace,
        kustomization_path=overlay,
        cluster_mode=cluster_mode,
    )

    for step in (
        lambda: gateway.substitute_overlay_vars(
            overlay, operator, operator.overlay_path
        ),
        lambda: gateway.create_namespace(operator.namespace),
        lambda: gateway.apply_kustomize_overlay(
            operator.namespace, operator.overlay_path
        ),
        lambda: gateway.wait_for_deployment_stable(
            operator.namespace, OPERATOR_DEPLOYMENT
        ),
    ):
        outcome = step()
        if not outcome.ok:
            return Result.failure(outcome.error)

    pods = gateway.run_command(
        [
            *env.kubectl_prefix(),
            "-n",
            operator.namespace,
            "get",
            "pods",
            "--no-headers",
            "-o",
            "custom-columns=:metadata.name",
        ]
    )
    if not pods.ok:
        return Result.failure(pods.error)

    pod_name = _find_operator_pod(pods.value)
    if not pod_name:
        return Result.failure(
            SetupError(f"No {OPERATOR_DEPLOYMENT} pod found in {operator.namespace}")
        )

    log_main_step("CRDs and operator installed", operator_namespace=operator.namespace)
    return Result.success(operator.model_copy(update={"pod_name": pod_name}))


def install_crds_and_operator(
    spin_namespace: str,
    cluster_mode: bool,
    defaults: Defaults,
    gateway_factory: GatewayFactory = KubectlGateway,
) -> Result[TestEnv]:
    """
    Prepare the environment of one test: base environment plus an operator.

    Cluster-mode tests share a single operator installed by whichever of them
    runs first. Namespace-mode tests each get their own operator, which
    ``TestEnv.cleanup`` deletes.
    """
    setup = common_setup(defaults, gateway_factory)
    if not setup.ok:
        return setup
    env = setup.value
    env.vars = env.vars.model_copy(update={"spin_namespace": spin_namespace})

    if cluster_mode:
        operator = cluster_operator.get_or_init(lambda: install_operator(env, True))
        env.operator_shared = True
    else:
        operator = install_operator(env, False)
    if not operator.ok:
        return Result.failure(operator.error)

    env.operator = operator.value
    return Result.success(env)
