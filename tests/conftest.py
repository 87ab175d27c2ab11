"""Shared pytest fixtures for the ai-skeleton test suite.

Provides reusable fixtures for:
- A miniature scaffold template tree on disk
- Zip archives of that tree, in GitHub export layout
- Mocked HTTP transports serving an archive
- Sample ``ProjectMeta`` records
"""

from __future__ import annotations

import io
import textwrap
import zipfile
from pathlib import Path

import httpx
import pytest

from aiskel.renderer.models import ProjectMeta


# ---------------------------------------------------------------------------
# Template content
# ---------------------------------------------------------------------------

CONFIG_YAML = textwrap.dedent(
    """\
    project:
      name: "ai_skeleton"
      version: "1.0.0"
      description: "AI Skeleton full-stack scaffold"

    server:
      port: 8080
    """
)

PACKAGE_JSON = textwrap.dedent(
    """\
    {
      "name": "ai-skeleton",
      "private": true,
      "version": "1.0.0",
      "description": "AI Skeleton frontend",
      "type": "module"
    }
    """
)

GO_MOD = "module github.com/richer/ai_skeleton\n\ngo 1.22\n"

MAIN_GO = textwrap.dedent(
    """\
    package main

    import "github.com/richer/ai_skeleton/internal/config"

    // AI Skeleton server entry point for ai_skeleton.
    func main() { config.Load("ai-skeleton") }
    """
)


def build_template_tree(root: Path) -> Path:
    """Write a miniature scaffold (markers, placeholders, excluded dirs) under *root*."""
    files = {
        "README.md": "# AI Skeleton\n\nStart with `make backend-dev` in ai_skeleton.\n",
        "Makefile": "backend-dev:\n\tcd backend && air\n",
        "backend/go.mod": GO_MOD,
        "backend/cmd/server/main.go": MAIN_GO,
        "backend/configs/config.yaml": CONFIG_YAML,
        "backend/tmp/build.log": "stale build output\n",
        "frontend/package.json": PACKAGE_JSON,
        "frontend/src/App.tsx": "export const title = 'AI Skeleton';\n",
        "frontend/node_modules/react/index.js": "module.exports = {};\n",
        "cli/main.go": "package main\n",
        ".git/HEAD": "ref: refs/heads/main\n",
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def make_zip(entries: dict[str, bytes | str | None]) -> bytes:
    """Build an in-memory zip; a ``None`` value creates a directory entry."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries.items():
            if data is None:
                archive.writestr(zipfile.ZipInfo(name.rstrip("/") + "/"), b"")
            else:
                archive.writestr(name, data)
    return buffer.getvalue()


def zip_tree(root: Path, prefix: str = "ai_skeleton-main") -> bytes:
    """Zip *root* under a single top-level *prefix* directory, like a GitHub export."""
    entries: dict[str, bytes | str | None] = {f"{prefix}/": None}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        entries[f"{prefix}/{rel}"] = None if path.is_dir() else path.read_bytes()
    return make_zip(entries)


def archive_transport(payload: bytes, status_code: int = 200) -> httpx.MockTransport:
    """Return a transport answering every request with *payload*."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=payload)

    return httpx.MockTransport(handler)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """A scaffold checkout containing placeholder tokens and excluded directories."""
    return build_template_tree(tmp_path / "ai_skeleton")


@pytest.fixture
def template_zip(template_root: Path) -> bytes:
    """The ``template_root`` tree zipped in GitHub archive layout."""
    return zip_tree(template_root)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Empty directory in which generated projects are created."""
    out = tmp_path / "workspace"
    out.mkdir()
    return out


@pytest.fixture
def demo_meta() -> ProjectMeta:
    return ProjectMeta(
        name="demo",
        description="Demo service",
        version="2.0.0",
        module="example.com/demo",
    )


@pytest.fixture
def package_json_text() -> str:
    return PACKAGE_JSON


@pytest.fixture
def config_yaml_text() -> str:
    return CONFIG_YAML


@pytest.fixture
def zip_builder():
    """The ``make_zip`` helper, for tests that need hand-crafted archives."""
    return make_zip


@pytest.fixture
def transport_factory():
    """The ``archive_transport`` helper."""
    return archive_transport
