"""
Constants used throughout the end-to-end harness.

This module defines:
- Environment variables that override configuration defaults
- Overlay locations relative to the test working directory
- Names of the resources the operator and Spinnaker deployments create
"""

# Environment overrides
KUBECONFIG_VAR = "KUBECONFIG"
OPERATOR_IMAGE_VAR = "OPERATOR_IMAGE"
HALYARD_IMAGE_VAR = "HALYARD_IMAGE"
BUCKET_VAR = "S3_BUCKET"
BUCKET_REGION_VAR = "S3_BUCKET_REGION"

# Kustomize overlays
OPERATOR_OVERLAY_BASIC_MODE = "testdata/operator/overlay_basicmode"
OPERATOR_OVERLAY_CLUSTER_MODE = "testdata/operator/overlay_clustermode"
SPINNAKER_BASE_OVERLAY = "testdata/spinnaker/base"

# Overlay files ending in this suffix are rendered with the resolved variables
TEMPLATE_SUFFIX = ".tmpl"

# Operator deployment
OPERATOR_NAMESPACE_PREFIX = "operator"
OPERATOR_DEPLOYMENT = "spinnaker-operator"
CRD_NAMESPACE = "default"
CRD_RESOURCES = ("spinsvc", "spinnakeraccounts")

# SpinnakerService custom resource
SPINNAKER_GROUP = "spinnaker.io"
SPINNAKER_VERSION = "v1alpha2"
SPINNAKER_PLURAL = "spinnakerservices"
SPINNAKER_SERVICE_NAME = "spinnaker"
SPINNAKER_STATUS_OK = "OK"

# Generated inline config files
SPIN_FILES_NAME = "files.yml"
SPIN_FILES_INDENT = " " * 8

# Bounded waits (seconds)
DEFAULT_WAIT_TIMEOUT = 300
DEFAULT_SPINNAKER_TIMEOUT = 900
DEFAULT_POLL_INTERVAL = 5
DEFAULT_HTTP_TIMEOUT = 30.0

# Labels applied to namespaces created by the harness
NAMESPACE_LABELS = {"test": "e2e", "operator": "spinnaker"}
