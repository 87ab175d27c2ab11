"""Safe zip extraction for downloaded template archives.

Every entry name is resolved against the destination directory and rejected
if the result would land outside of it. Names are validated for the whole
archive before the first byte is written, so a hostile archive leaves the
destination untouched.
"""

from __future__ import annotations

import os
import shutil
import stat
import zipfile
import zlib
from pathlib import Path

from .errors import ExtractionError, PathTraversalError

_DEFAULT_FILE_MODE = 0o644


def extract_archive(archive_path: str | Path, dest_dir: str | Path) -> None:
    """Expand the zip archive at *archive_path* into *dest_dir*.

    Directory entries are created with their parents. File entries are
    streamed byte-for-byte and keep the permission bits stored in the
    archive.

    Raises:
        PathTraversalError: If any entry escapes *dest_dir*.
        ExtractionError: If the archive is corrupt, an entry cannot be read
            (encrypted, unsupported compression) or a write fails. Files
            written before the failure are left in place.
    """
    dest = Path(dest_dir)
    try:
        with zipfile.ZipFile(archive_path) as archive:
            members = archive.infolist()
            targets = [(info, safe_target(dest, info.filename)) for info in members]

            dest.mkdir(parents=True, exist_ok=True)
            for info, target in targets:
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as src, open(target, "wb") as out:
                    shutil.copyfileobj(src, out)
                os.chmod(target, _entry_mode(info))
    except (zipfile.BadZipFile, zlib.error, EOFError) as exc:
        raise ExtractionError(f"Corrupt template archive {archive_path}: {exc}") from exc
    except (RuntimeError, NotImplementedError) as exc:
        # Encrypted entries and unsupported compression methods.
        raise ExtractionError(f"Cannot read template archive {archive_path}: {exc}") from exc
    except OSError as exc:
        raise ExtractionError(f"Failed to extract {archive_path}: {exc}") from exc


def safe_target(dest_dir: Path, entry_name: str) -> Path:
    """Return the path *entry_name* extracts to, or raise ``PathTraversalError``.

    The check is lexical: the joined path is normalised and must start with
    the normalised destination followed by a separator.
    """
    root = os.path.normpath(os.path.abspath(dest_dir))
    target = os.path.normpath(os.path.join(root, entry_name))
    if not target.startswith(root + os.sep):
        raise PathTraversalError(entry_name, Path(target))
    return Path(target)


def _entry_mode(info: zipfile.ZipInfo) -> int:
    """Permission bits stored in the entry's Unix attributes (0o644 if absent)."""
    mode = stat.S_IMODE(info.external_attr >> 16)
    return mode or _DEFAULT_FILE_MODE
