"""Materialization orchestrator.

Sequences destination check -> template acquisition -> extraction (or local
root resolution) -> tree walk. The
destination check runs before anything touches the network or the file
system, so an existing directory is never written to.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path

from aiskel.config import DEFAULT_EXCLUDED_PATHS, ScaffoldConfig
from aiskel.utils import print_info

from .errors import DestinationExistsError
from .models import ProjectMeta, RenderStage
from .rewriter import ContentRewriter
from .sources import TemplateSource, build_source
from .walker import walk_tree


class ProjectRenderer:
    """Renders one project from a template source.

    Attributes:
        source: Where the template tree comes from.
        rewriter: Placeholder substitution pipeline.
        excluded: Relative path prefixes left out of the generated project.
        stage: The step the renderer is in, ``FAILED`` after any error.
        failed_stage: The step that was running when the last render failed.
        written: Files produced by the last successful render.
    """

    def __init__(
        self,
        source: TemplateSource,
        rewriter: ContentRewriter | None = None,
        excluded: Iterable[str] = DEFAULT_EXCLUDED_PATHS,
    ) -> None:
        self.source = source
        self.rewriter = rewriter or ContentRewriter()
        self.excluded = tuple(excluded)
        self.stage = RenderStage.IDLE
        self.failed_stage: RenderStage | None = None
        self.written: list[Path] = []

    async def render(self, meta: ProjectMeta, output_dir: str | Path = ".") -> Path:
        """Materialize *meta* into ``<output_dir>/<meta.name>``.

        Returns:
            Path to the generated project root.

        Raises:
            DestinationExistsError: If the destination already exists.
            RenderError: Any acquisition, extraction or walk failure. A
                partially written destination is left in place.
        """
        destination = Path(output_dir) / meta.name
        self.failed_stage = None
        try:
            self.stage = RenderStage.CHECK_DESTINATION
            if destination.exists() or destination.is_symlink():
                raise DestinationExistsError(destination)

            self.stage = RenderStage.ACQUIRING
            async with self.source.open(self._enter_stage) as template_root:
                self.stage = RenderStage.WALKING
                self.written = await asyncio.to_thread(
                    walk_tree,
                    template_root,
                    destination,
                    meta,
                    self.rewriter,
                    self.excluded,
                )
        except BaseException:
            self.failed_stage = self.stage
            self.stage = RenderStage.FAILED
            raise

        self.stage = RenderStage.DONE
        print_info(f"Wrote {len(self.written)} files to {destination}")
        return destination

    def _enter_stage(self, stage: RenderStage) -> None:
        self.stage = stage


async def render_project(
    meta: ProjectMeta,
    config: ScaffoldConfig | None = None,
    output_dir: str | Path = ".",
) -> Path:
    """Render *meta* with the source and exclusions described by *config*."""
    config = config or ScaffoldConfig()
    renderer = ProjectRenderer(build_source(config, meta), excluded=config.excluded_paths)
    return await renderer.render(meta, output_dir)
