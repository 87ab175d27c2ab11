"""Template sources: where the scaffold tree comes from.

Two variants provide the same capability, a template root directory:

* ``RemoteTemplateSource`` downloads a zip archive (by default the GitHub
  export of the official scaffold), extracts it into a private staging
  directory and yields the single top-level directory inside it.
* ``LocalTemplateSource`` yields an already checked-out scaffold found in the
  working directory or its parent.

Both are used as ``async with source.open() as root: ...``; the remote
variant removes its staging directory when the block exits, whatever the
outcome.
"""

from __future__ import annotations

import asyncio
import tempfile
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from aiskel.config import DEFAULT_ROOT_MARKERS, DEFAULT_TEMPLATE_URL
from aiskel.utils import print_info, print_warning

from .errors import AcquisitionError, ExtractionError, RootNotFoundError
from .extractor import extract_archive
from .models import RenderStage

if TYPE_CHECKING:
    from aiskel.config import ScaffoldConfig

    from .models import ProjectMeta

StageCallback = Callable[[RenderStage], None]

_STAGING_PREFIX = "ai_skeleton_template_"
_ARCHIVE_NAME = "template.zip"
_EXTRACT_DIR = "extracted"


class TemplateSource(ABC):
    """Provides a template root directory for the duration of a render."""

    @abstractmethod
    def open(self, on_stage: StageCallback | None = None) -> AbstractAsyncContextManager[Path]:
        """Async context manager yielding the template root.

        *on_stage*, when given, is called with ``RenderStage.EXTRACTING`` once
        the template is being unpacked or located.
        """


# ---------------------------------------------------------------------------
# Remote archive
# ---------------------------------------------------------------------------


class RemoteTemplateSource(TemplateSource):
    """Downloads and extracts a template archive.

    Args:
        url: Location of the zip archive.
        transport: Optional ``httpx`` transport, used by tests to serve the
            archive without a network.
    """

    def __init__(
        self,
        url: str = DEFAULT_TEMPLATE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.transport = transport

    @asynccontextmanager
    async def open(self, on_stage: StageCallback | None = None) -> AsyncIterator[Path]:
        if self.url == DEFAULT_TEMPLATE_URL:
            print_info("Fetching the latest template from the official repository...")
        else:
            print_info(f"Fetching template from {self.url}...")

        with tempfile.TemporaryDirectory(prefix=_STAGING_PREFIX) as staging:
            staging_path = Path(staging)
            archive_path = await self.acquire(staging_path / _ARCHIVE_NAME)

            if on_stage is not None:
                on_stage(RenderStage.EXTRACTING)
            extract_path = staging_path / _EXTRACT_DIR
            await asyncio.to_thread(extract_archive, archive_path, extract_path)
            yield locate_template_root(extract_path)

    async def acquire(self, target: Path) -> Path:
        """Stream the archive at ``self.url`` into *target*.

        Returns:
            *target*, once the whole body has been written.

        Raises:
            AcquisitionError: On a transport failure or a non-200 status.
        """
        try:
            async with httpx.AsyncClient(
                transport=self.transport,
                follow_redirects=True,
                timeout=None,
            ) as client:
                await download_file(client, self.url, target)
        except httpx.HTTPError as exc:
            raise AcquisitionError(self.url, str(exc) or type(exc).__name__) from exc
        except OSError as exc:
            raise AcquisitionError(self.url, f"cannot write {target}: {exc}") from exc
        return target


async def download_file(client: httpx.AsyncClient, url: str, target: Path) -> None:
    """GET *url* and write the body to *target* chunk by chunk.

    File operations run in a worker thread so the event loop never blocks on
    disk I/O.
    """
    async with client.stream("GET", url) as response:
        if response.status_code != httpx.codes.OK:
            raise AcquisitionError(
                url,
                f"status code {response.status_code}",
                status_code=response.status_code,
            )
        out = await asyncio.to_thread(open, target, "wb")
        try:
            async for chunk in response.aiter_bytes():
                await asyncio.to_thread(out.write, chunk)
        finally:
            await asyncio.to_thread(out.close)


def locate_template_root(extract_dir: Path) -> Path:
    """Return the top-level directory of an extracted archive.

    Source-hosting exports hold exactly one directory (``<repo>-<ref>``).
    Directories are considered in name order; extras trigger a warning.

    Raises:
        ExtractionError: If the archive contained no directory.
    """
    try:
        directories = sorted(
            (entry for entry in extract_dir.iterdir() if entry.is_dir()),
            key=lambda p: p.name,
        )
    except OSError as exc:
        raise ExtractionError(f"Cannot read extracted template at {extract_dir}: {exc}") from exc

    if not directories:
        raise ExtractionError("Template archive contains no top-level directory")
    if len(directories) > 1:
        names = ", ".join(d.name for d in directories)
        print_warning(
            f"  Template archive has {len(directories)} top-level directories "
            f"({names}); using {directories[0].name}"
        )
    return directories[0]


# ---------------------------------------------------------------------------
# Local checkout
# ---------------------------------------------------------------------------


class LocalTemplateSource(TemplateSource):
    """Uses a scaffold checkout at the working directory or its parent.

    Args:
        start: Directory to search from; the working directory by default.
        markers: Relative paths that must all exist for a directory to count
            as the scaffold root.
    """

    def __init__(
        self,
        start: str | Path | None = None,
        markers: Iterable[str] = DEFAULT_ROOT_MARKERS,
    ) -> None:
        self.start = Path(start) if start is not None else None
        self.markers = list(markers)

    def is_root(self, directory: Path) -> bool:
        return all((directory / marker).exists() for marker in self.markers)

    def resolve(self) -> Path:
        """Return the scaffold root, checking the start directory then its parent.

        Raises:
            RootNotFoundError: If neither directory carries every marker.
        """
        start = (self.start or Path.cwd()).resolve()
        for candidate in (start, start.parent):
            if self.is_root(candidate):
                return candidate
        raise RootNotFoundError(start, self.markers)

    @asynccontextmanager
    async def open(self, on_stage: StageCallback | None = None) -> AsyncIterator[Path]:
        if on_stage is not None:
            on_stage(RenderStage.EXTRACTING)
        root = self.resolve()
        print_info(f"Using local scaffold at {root}")
        yield root


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def build_source(config: "ScaffoldConfig", meta: "ProjectMeta | None" = None) -> TemplateSource:
    """Pick the template source described by *config*.

    A ``template_url`` on *meta* overrides the configured archive URL.
    """
    if config.mode == "local":
        return LocalTemplateSource(markers=config.root_markers)
    url = (meta.template_url if meta is not None else None) or config.template_url
    return RemoteTemplateSource(url)
