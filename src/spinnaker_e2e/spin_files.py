"""
Inline config files for Spinnaker overlays.

Some tests need a local file (a kubeconfig, a profile) embedded into the
SpinnakerService manifest under ``spec.spinnakerConfig.files``. The file is
written as a ``files.yml`` patch inside the overlay, which the overlay's
kustomization is expected to reference.
"""

import logging
from pathlib import Path

from spinnaker_e2e.constants import SPIN_FILES_INDENT, SPIN_FILES_NAME
from spinnaker_e2e.errors import SpinFilesError
from spinnaker_e2e.utils.result import Result

logger = logging.getLogger(__name__)

SPIN_FILES_TEMPLATE = """
# This file is automatically generated by integration tests (spin_files.py), any changes will be lost
apiVersion: spinnaker.io/v1alpha2
kind: SpinnakerService
metadata:
  name: spinnaker
spec:
  spinnakerConfig:
    files:
      {name}: |
{content}
"""


def generate_spin_files(
    overlay: str | Path, name: str, file_path: str | Path
) -> Result[Path]:
    """
    Write ``<overlay>/files.yml`` embedding the content of ``file_path``.

    Args:
        overlay: Kustomize overlay directory
        name: Key of the file under ``spinnakerConfig.files``
        file_path: Local file whose content is embedded

    Returns:
        Result carrying the path of the generated file
    """
    try:
        with open(file_path, encoding="utf-8", errors="surrogateescape") as source:
            indented = "".join(
                SPIN_FILES_INDENT + line.rstrip("\r\n") + "\n" for line in source
            )
    except OSError as e:
        return Result.failure(SpinFilesError(str(file_path), str(e), cause=e))

    target = Path(overlay) / SPIN_FILES_NAME
    try:
        target.write_text(
            SPIN_FILES_TEMPLATE.format(name=name, content=indented),
            encoding="utf-8",
            errors="surrogateescape",
        )
    except OSError as e:
        return Result.failure(
            SpinFilesError(str(target), f"unable to generate file: {e}", cause=e)
        )

    logger.info(f"Generated {target} embedding {file_path} as {name}")
    return Result.success(target)
