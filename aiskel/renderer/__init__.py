"""Template materialization engine.

Turns the AI Skeleton scaffold (downloaded archive or local checkout) into a
new project directory with the project's own identifiers substituted in.

Quick usage::

    from aiskel.renderer import ProjectMeta, render_project

    meta = ProjectMeta(name="demo", module="example.com/demo")
    project_path = await render_project(meta)
"""

from aiskel.renderer.errors import (
    AcquisitionError,
    DestinationExistsError,
    ExtractionError,
    PathTraversalError,
    RenderError,
    RootNotFoundError,
    WalkError,
)
from aiskel.renderer.extractor import extract_archive
from aiskel.renderer.models import ProjectMeta
from aiskel.renderer.orchestrator import ProjectRenderer, RenderStage, render_project
from aiskel.renderer.rewriter import ContentRewriter, rewrite_content, to_kebab_case, to_title
from aiskel.renderer.sources import (
    LocalTemplateSource,
    RemoteTemplateSource,
    TemplateSource,
    build_source,
)
from aiskel.renderer.walker import is_excluded, walk_tree

__all__ = [
    "AcquisitionError",
    "ContentRewriter",
    "DestinationExistsError",
    "ExtractionError",
    "LocalTemplateSource",
    "PathTraversalError",
    "ProjectMeta",
    "ProjectRenderer",
    "RemoteTemplateSource",
    "RenderError",
    "RenderStage",
    "RootNotFoundError",
    "TemplateSource",
    "WalkError",
    "build_source",
    "extract_archive",
    "is_excluded",
    "render_project",
    "rewrite_content",
    "to_kebab_case",
    "to_title",
    "walk_tree",
]
