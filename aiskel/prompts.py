"""Interactive collection of project metadata.

Fields already supplied on the command line are kept; the rest are asked for
on the console with sensible defaults.
"""

from __future__ import annotations

from rich.prompt import Prompt

from aiskel.config import ScaffoldConfig
from aiskel.renderer.models import ProjectMeta
from aiskel.utils import console, current_dir_name


def collect_project_meta(
    config: ScaffoldConfig,
    name: str | None = None,
    description: str | None = None,
    version: str | None = None,
    module: str | None = None,
    template_url: str | None = None,
    interactive: bool = True,
) -> ProjectMeta:
    """Build a ``ProjectMeta``, prompting for the fields left empty.

    The version is never prompted for: it falls back to
    ``config.default_version``.

    Raises:
        ValueError: If no name is available and prompting is disabled.
        pydantic.ValidationError: If the collected values are invalid (for
            example a blank name typed at the prompt).
    """
    name = (name or "").strip()
    if not name:
        if not interactive:
            raise ValueError("a project name is required when prompting is disabled")
        name = Prompt.ask("Project name", default=current_dir_name(), console=console).strip()

    if description is None and interactive:
        description = Prompt.ask("Project description", default="", console=console)

    if not module and interactive:
        module = Prompt.ask(
            "Module path", default=config.default_module(name), console=console
        )

    return ProjectMeta(
        name=name,
        description=(description or "").strip(),
        version=(version or "").strip() or config.default_version,
        module=(module or "").strip() or config.default_module(name),
        template_url=template_url,
    )
