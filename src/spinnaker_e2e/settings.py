"""Harness settings and variable resolution using pydantic-settings.

Environment overrides are read through pydantic-settings models at call time,
so a test suite that exports a variable before setup is picked up. Resolution
of the variables used in overlay templates lives here as well.
"""

import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from spinnaker_e2e.constants import (
    BUCKET_REGION_VAR,
    BUCKET_VAR,
    HALYARD_IMAGE_VAR,
    KUBECONFIG_VAR,
    OPERATOR_IMAGE_VAR,
)
from spinnaker_e2e.errors import ConfigurationError
from spinnaker_e2e.models import Defaults, Vars
from spinnaker_e2e.utils.result import Result

logger = logging.getLogger(__name__)


class EnvOverrides(BaseSettings):
    """Optional overrides for the configuration defaults.

    An empty value counts as not set.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    kubeconfig: str = Field(
        default="",
        validation_alias=KUBECONFIG_VAR,
        description="Kubeconfig used for every cluster command",
    )
    operator_image: str = Field(
        default="",
        validation_alias=OPERATOR_IMAGE_VAR,
        description="Operator image substituted into operator overlays",
    )
    halyard_image: str = Field(
        default="",
        validation_alias=HALYARD_IMAGE_VAR,
        description="Halyard image substituted into operator overlays",
    )
    s3_bucket: str = Field(
        default="",
        validation_alias=BUCKET_VAR,
        description="S3 bucket used as Spinnaker persistent storage",
    )
    s3_bucket_region: str = Field(
        default="",
        validation_alias=BUCKET_REGION_VAR,
        description="Region of the S3 bucket",
    )


class HarnessSettings(BaseSettings):
    """Logging options for harness runs."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="SPINNAKER_E2E_LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=False,
        validation_alias="SPINNAKER_E2E_JSON_LOGS",
        description="Emit JSON formatted log records",
    )


def _pick(variable: str, override: str, default: str, label: str) -> str:
    if override:
        value = override
    else:
        logger.info(f"{variable} env var not set, using default")
        value = default
    logger.info(f"Using {label} {value}")
    return value


def resolve_vars(defaults: Defaults) -> Result[Vars]:
    """
    Resolve the variables in effect for this process.

    Each variable takes its environment override when set and its default
    otherwise. The kubeconfig falls back to ``~/.kube/config`` when neither
    is set.

    Args:
        defaults: Fallback values supplied by the test suite

    Returns:
        Result carrying the resolved variables, or a ConfigurationError when
        the home directory cannot be determined
    """
    overrides = EnvOverrides()

    kubeconfig = overrides.kubeconfig or defaults.kubeconfig_default
    if not kubeconfig:
        logger.info(f"{KUBECONFIG_VAR} env var not set, using default")
        try:
            home = Path.home()
        except (RuntimeError, KeyError) as e:
            return Result.failure(
                ConfigurationError(
                    "Unable to determine user home directory for kubeconfig",
                    user_action=f"Set {KUBECONFIG_VAR} explicitly",
                    cause=e,
                )
            )
        kubeconfig = str(home / ".kube" / "config")
    logger.info(f"Using kubeconfig {kubeconfig}")

    return Result.success(
        Vars(
            kubeconfig=kubeconfig,
            operator_image=_pick(
                OPERATOR_IMAGE_VAR,
                overrides.operator_image,
                defaults.operator_image_default,
                "operator image",
            ),
            halyard_image=_pick(
                HALYARD_IMAGE_VAR,
                overrides.halyard_image,
                defaults.halyard_image_default,
                "halyard image",
            ),
            s3_bucket=_pick(
                BUCKET_VAR, overrides.s3_bucket, defaults.bucket_default, "bucket"
            ),
            s3_bucket_region=_pick(
                BUCKET_REGION_VAR,
                overrides.s3_bucket_region,
                defaults.bucket_region_default,
                "bucket region",
            ),
        )
    )
