"""Tests for template sources (aiskel.renderer.sources).

Covers:
- RemoteTemplateSource download, extraction and staging cleanup
- Non-200 responses and transport failures
- Template root location inside an extracted archive
- LocalTemplateSource root resolution (current dir, parent, not found)
- build_source selection from configuration
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

from aiskel.config import DEFAULT_TEMPLATE_URL, ScaffoldConfig
from aiskel.renderer import sources
from aiskel.renderer.errors import (
    AcquisitionError,
    ExtractionError,
    PathTraversalError,
    RootNotFoundError,
)
from aiskel.renderer.models import ProjectMeta, RenderStage
from aiskel.renderer.sources import (
    LocalTemplateSource,
    RemoteTemplateSource,
    build_source,
    locate_template_root,
)

URL = "https://example.test/ai_skeleton/archive/main.zip"


# ---------------------------------------------------------------------------
# RemoteTemplateSource
# ---------------------------------------------------------------------------


class TestRemoteTemplateSource:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_yields_extracted_template_root(self, template_zip, transport_factory):
        source = RemoteTemplateSource(URL, transport=transport_factory(template_zip))

        async with source.open() as root:
            assert root.name == "ai_skeleton-main"
            assert (root / "backend" / "go.mod").read_text().startswith("module github.com/richer")
            staging = root.parent.parent

        assert not staging.exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_staging_removed_when_block_fails(self, template_zip, transport_factory):
        source = RemoteTemplateSource(URL, transport=transport_factory(template_zip))
        captured: list[Path] = []

        with pytest.raises(RuntimeError):
            async with source.open() as root:
                captured.append(root.parent.parent)
                raise RuntimeError("walk failed")

        assert captured and not captured[0].exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_200_status_raises(self, transport_factory):
        source = RemoteTemplateSource(URL, transport=transport_factory(b"not found", status_code=404))

        with pytest.raises(AcquisitionError) as exc_info:
            async with source.open():
                pass

        assert exc_info.value.status_code == 404
        assert "404" in str(exc_info.value)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connection_error_raises_acquisition_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        source = RemoteTemplateSource(URL, transport=httpx.MockTransport(handler))

        with pytest.raises(AcquisitionError) as exc_info:
            async with source.open():
                pass

        assert exc_info.value.status_code is None
        assert exc_info.value.url == URL

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_follows_redirects(self, template_zip):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "example.test":
                return httpx.Response(302, headers={"Location": "https://codeload.example.test/main.zip"})
            return httpx.Response(200, content=template_zip)

        source = RemoteTemplateSource(URL, transport=httpx.MockTransport(handler))

        async with source.open() as root:
            assert (root / "README.md").exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_hostile_archive_is_rejected(self, zip_builder, transport_factory):
        payload = zip_builder({"repo-main/": None, "repo-main/../../../evil.sh": "rm -rf /"})
        source = RemoteTemplateSource(URL, transport=transport_factory(payload))

        with pytest.raises(PathTraversalError):
            async with source.open():
                pass

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_corrupt_archive_raises_extraction_error(self, transport_factory):
        source = RemoteTemplateSource(URL, transport=transport_factory(b"<html>oops</html>"))

        with pytest.raises(ExtractionError):
            async with source.open():
                pass

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_acquire_streams_body_to_file(self, tmp_path, transport_factory):
        payload = b"x" * 200_000
        source = RemoteTemplateSource(URL, transport=transport_factory(payload))

        target = await source.acquire(tmp_path / "template.zip")

        assert target.read_bytes() == payload

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reports_extracting_after_download(self, template_zip, transport_factory):
        seen: list[RenderStage] = []
        source = RemoteTemplateSource(URL, transport=transport_factory(template_zip))

        async with source.open(seen.append):
            pass

        assert seen == [RenderStage.EXTRACTING]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_download_never_reports_extracting(self, transport_factory):
        seen: list[RenderStage] = []
        source = RemoteTemplateSource(URL, transport=transport_factory(b"", status_code=503))

        with pytest.raises(AcquisitionError):
            async with source.open(seen.append):
                pass

        assert seen == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_file_writes_run_in_worker_thread(self, tmp_path, transport_factory, monkeypatch):
        calls: list[str] = []
        real_to_thread = asyncio.to_thread

        async def recording_to_thread(func, /, *args, **kwargs):
            calls.append(getattr(func, "__name__", repr(func)))
            return await real_to_thread(func, *args, **kwargs)

        monkeypatch.setattr(sources.asyncio, "to_thread", recording_to_thread)
        source = RemoteTemplateSource(URL, transport=transport_factory(b"payload"))

        await source.acquire(tmp_path / "template.zip")

        assert calls[0] == "open"
        assert "write" in calls
        assert calls[-1] == "close"

    @pytest.mark.unit
    def test_default_url(self):
        assert RemoteTemplateSource().url == DEFAULT_TEMPLATE_URL


class TestLocateTemplateRoot:
    @pytest.mark.unit
    def test_single_directory(self, tmp_path):
        (tmp_path / "repo-main").mkdir()
        (tmp_path / "stray.txt").write_text("x")

        assert locate_template_root(tmp_path) == tmp_path / "repo-main"

    @pytest.mark.unit
    def test_multiple_directories_pick_first_by_name(self, tmp_path):
        for name in ("zeta", "alpha", "mid"):
            (tmp_path / name).mkdir()

        assert locate_template_root(tmp_path) == tmp_path / "alpha"

    @pytest.mark.unit
    def test_no_directory_raises(self, tmp_path):
        (tmp_path / "only-file.txt").write_text("x")

        with pytest.raises(ExtractionError):
            locate_template_root(tmp_path)


# ---------------------------------------------------------------------------
# LocalTemplateSource
# ---------------------------------------------------------------------------


class TestLocalTemplateSource:
    @pytest.mark.unit
    def test_resolves_start_directory(self, template_root):
        source = LocalTemplateSource(start=template_root)

        assert source.resolve() == template_root.resolve()

    @pytest.mark.unit
    def test_resolves_parent_directory(self, template_root):
        source = LocalTemplateSource(start=template_root / "backend")

        assert source.resolve() == template_root.resolve()

    @pytest.mark.unit
    def test_grandparent_is_not_searched(self, template_root):
        source = LocalTemplateSource(start=template_root / "backend" / "cmd")

        with pytest.raises(RootNotFoundError):
            source.resolve()

    @pytest.mark.unit
    def test_every_marker_required(self, template_root):
        (template_root / "Makefile").unlink()

        with pytest.raises(RootNotFoundError) as exc_info:
            LocalTemplateSource(start=template_root).resolve()

        assert "Makefile" in exc_info.value.markers

    @pytest.mark.unit
    def test_defaults_to_working_directory(self, template_root, monkeypatch):
        monkeypatch.chdir(template_root / "frontend")

        assert LocalTemplateSource().resolve() == template_root.resolve()

    @pytest.mark.unit
    def test_custom_markers(self, tmp_path):
        (tmp_path / "template.toml").write_text("")

        source = LocalTemplateSource(start=tmp_path, markers=["template.toml"])

        assert source.resolve() == tmp_path.resolve()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_open_yields_root_and_keeps_it(self, template_root):
        source = LocalTemplateSource(start=template_root)
        seen: list[RenderStage] = []

        async with source.open(seen.append) as root:
            assert root == template_root.resolve()

        assert template_root.exists()
        assert seen == [RenderStage.EXTRACTING]


# ---------------------------------------------------------------------------
# build_source
# ---------------------------------------------------------------------------


class TestBuildSource:
    @pytest.mark.unit
    def test_remote_by_default(self):
        source = build_source(ScaffoldConfig())

        assert isinstance(source, RemoteTemplateSource)
        assert source.url == DEFAULT_TEMPLATE_URL

    @pytest.mark.unit
    def test_meta_url_overrides_config(self):
        meta = ProjectMeta(name="demo", template_url="https://git.example.com/t.zip")

        source = build_source(ScaffoldConfig(template_url="https://other/t.zip"), meta)

        assert isinstance(source, RemoteTemplateSource)
        assert source.url == "https://git.example.com/t.zip"

    @pytest.mark.unit
    def test_local_mode(self):
        config = ScaffoldConfig(mode="local", root_markers=["Makefile"])

        source = build_source(config, ProjectMeta(name="demo", template_url="https://ignored"))

        assert isinstance(source, LocalTemplateSource)
        assert source.markers == ["Makefile"]
