"""Template tree traversal with exclusion rules.

Walks the template root pre-order, drops excluded subtrees, recreates
directories at the destination and pushes every retained file through the
``ContentRewriter``.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable, Iterator
from pathlib import Path

from aiskel.config import DEFAULT_EXCLUDED_PATHS

from .errors import WalkError
from .models import ProjectMeta
from .rewriter import ContentRewriter


def is_excluded(rel_path: str, excluded: Iterable[str] = DEFAULT_EXCLUDED_PATHS) -> bool:
    """Return ``True`` if *rel_path* is an excluded prefix or lies beneath one.

    Matching works on whole path components: ``cli`` excludes ``cli`` and
    ``cli/main.go`` but not ``client/app.ts``.
    """
    rel = rel_path.replace("\\", "/").strip("/")
    for prefix in excluded:
        if rel == prefix or rel.startswith(prefix + "/"):
            return True
    return False


def iter_tree(
    root: Path,
    excluded: Iterable[str] = DEFAULT_EXCLUDED_PATHS,
    skip: Path | None = None,
) -> Iterator[tuple[Path, str]]:
    """Yield ``(path, relative_posix_path)`` for every retained entry under *root*.

    Entries are produced pre-order in sorted name order. An excluded
    directory is never descended into. Symlinks to directories are reported
    as plain entries and not followed. *skip*, when given, is an absolute
    path left out of the traversal (the destination, when it lives inside
    the template root).
    """
    excluded = tuple(excluded)

    def _visit(directory: Path) -> Iterator[tuple[Path, str]]:
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            rel = entry.relative_to(root).as_posix()
            if is_excluded(rel, excluded):
                continue
            if skip is not None and entry.resolve() == skip:
                continue
            yield entry, rel
            if entry.is_dir() and not entry.is_symlink():
                yield from _visit(entry)

    yield from _visit(root)


def walk_tree(
    src_root: str | Path,
    dst: str | Path,
    meta: ProjectMeta,
    rewriter: ContentRewriter | None = None,
    excluded: Iterable[str] = DEFAULT_EXCLUDED_PATHS,
) -> list[Path]:
    """Copy the template tree at *src_root* into *dst*, rewriting placeholders.

    Args:
        src_root: Template root directory.
        dst: Destination project directory; created if missing.
        meta: Project identifiers substituted into each file.
        rewriter: Rule pipeline; the default pipeline when omitted.
        excluded: Relative path prefixes that are never copied.

    Returns:
        Destination paths of every file written, in traversal order.

    Raises:
        WalkError: On any I/O failure. Files already written stay in place.
    """
    rewriter = rewriter or ContentRewriter()
    src = Path(src_root)
    out = Path(dst)
    written: list[Path] = []

    try:
        out.mkdir(parents=True, exist_ok=True)
        for path, rel in iter_tree(src, excluded, skip=out.resolve()):
            target = out / rel
            if path.is_dir() and not path.is_symlink():
                target.mkdir(parents=True, exist_ok=True)
                shutil.copymode(path, target)
                continue
            copy_with_rewrite(path, target, meta, rewriter)
            written.append(target)
    except OSError as exc:
        raise WalkError(f"Failed to copy template from {src} to {out}: {exc}") from exc

    return written


def copy_with_rewrite(
    src: Path, dst: Path, meta: ProjectMeta, rewriter: ContentRewriter
) -> None:
    """Write *src* to *dst* with placeholders replaced, keeping the file mode.

    Content that is not valid UTF-8 (images, fonts) is copied unchanged.
    """
    raw = src.read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        data = raw
    else:
        data = rewriter.rewrite(text, meta).encode("utf-8")

    dst.parent.mkdir(parents=True, exist_ok=True)
    dst.write_bytes(data)
    shutil.copymode(src, dst)
