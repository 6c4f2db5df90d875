"""
Overlay variable substitution.

Kustomize overlays under ``testdata/`` may ship ``*.tmpl`` files. Rendering
an overlay writes every template without the suffix, e.g.
``deployment.yml.tmpl`` becomes ``deployment.yml``, with the variables of the
current environment substituted.

Shared base overlays are rendered in place. Overlays rendered per operator
installation are copied first to a sibling directory (see
``rendered_overlay_path``) so parallel installs never see each other's files
and relative references such as ``../base`` keep working.
"""

import logging
import shutil
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from spinnaker_e2e.constants import TEMPLATE_SUFFIX

logger = logging.getLogger(__name__)


class OverlayTemplating:
    """Renders the templates of one overlay directory."""

    def __init__(self, overlay_path: str | Path):
        self.overlay_path = Path(overlay_path)
        self._env = Environment(
            loader=FileSystemLoader(str(self.overlay_path)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def templates(self) -> list[Path]:
        return sorted(self.overlay_path.glob(f"*{TEMPLATE_SUFFIX}"))

    def render_template(self, template_name: str, data: dict[str, Any]) -> str:
        """
        Render a template of this overlay with the given data.

        Args:
            template_name: File name of the template inside the overlay
            data: Variables available to the template

        Returns:
            Rendered template
        """
        return self._env.get_template(template_name).render(**data)

    def render(
        self, data: dict[str, Any], output_path: str | Path | None = None
    ) -> list[Path]:
        """
        Render every template of the overlay.

        Args:
            data: Variables available to the templates
            output_path: Directory receiving a copy of the overlay with the
                templates rendered. The overlay is rendered in place when unset

        Returns:
            Paths of the files written

        Raises:
            TemplateError: A template is invalid or uses an unknown variable
            OSError: The overlay cannot be read or written
        """
        if not self.overlay_path.is_dir():
            raise FileNotFoundError(f"Overlay directory {self.overlay_path} not found")

        target_dir = self.overlay_path
        if output_path is not None:
            target_dir = Path(output_path)
            shutil.copytree(
                self.overlay_path,
                target_dir,
                ignore=shutil.ignore_patterns(f"*{TEMPLATE_SUFFIX}"),
                dirs_exist_ok=True,
            )

        written = []
        for template in self.templates():
            target = target_dir / template.name[: -len(TEMPLATE_SUFFIX)]
            target.write_text(self.render_template(template.name, data))
            logger.debug(f"Rendered {template} to {target}")
            written.append(target)
        return written


def rendered_overlay_path(overlay_path: str | Path, suffix: str) -> str:
    """Sibling directory holding the copy of an overlay rendered for ``suffix``."""
    overlay = Path(overlay_path)
    return str(overlay.with_name(f"{overlay.name}.{suffix}"))


__all__ = ["OverlayTemplating", "TemplateError", "rendered_overlay_path"]
