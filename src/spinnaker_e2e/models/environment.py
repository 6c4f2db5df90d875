"""
Environment models for the end-to-end harness.

This module defines the configuration defaults supplied by a test suite, the
variables resolved from them, and the identity of an operator installation.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from spinnaker_e2e.constants import SPINNAKER_BASE_OVERLAY


class Defaults(BaseModel):
    """Fallback values used when no environment override is set."""

    model_config = ConfigDict(frozen=True)

    operator_image_default: str = Field(..., description="Operator image")
    halyard_image_default: str = Field(..., description="Halyard image")
    bucket_default: str = Field(..., description="S3 bucket for Spinnaker storage")
    bucket_region_default: str = Field(..., description="Region of the S3 bucket")
    crd_manifests: str = Field(..., description="Path or URL of the CRD manifests")
    operator_kustomize_base: str = Field(
        ..., description="Base kustomize overlay shared by all operator overlays"
    )
    spinnaker_kustomize_base: str = Field(
        SPINNAKER_BASE_OVERLAY,
        description="Base kustomize overlay shared by all Spinnaker overlays",
    )
    kubeconfig_default: str = Field(
        "", description="Kubeconfig path, falls back to ~/.kube/config when empty"
    )


class Vars(BaseModel):
    """Variables resolved for this process and used in overlay templates."""

    model_config = ConfigDict(frozen=True)

    kubeconfig: str
    operator_image: str
    halyard_image: str
    s3_bucket: str
    s3_bucket_region: str
    spin_namespace: str = ""

    def kubectl_prefix(self) -> list[str]:
        return ["kubectl", f"--kubeconfig={self.kubeconfig}"]

    def template_context(self) -> dict[str, Any]:
        return self.model_dump()


class Operator(BaseModel):
    """Identity of one operator installation."""

    model_config = ConfigDict(frozen=True)

    kustomization_path: str
    namespace: str
    overlay_path: str = Field(
        "", description="Copy of the overlay rendered for this installation"
    )
    pod_name: str = ""

    def template_context(self) -> dict[str, Any]:
        return self.model_dump()
