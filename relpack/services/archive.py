"""Archive creation for Unix-like targets."""

from __future__ import annotations

import contextlib
import gzip
import tarfile
from pathlib import Path

from relpack.core.result import Err, Ok, Result
from relpack.platform.files import atomic_output

from .errors import ArchiveError

__all__ = ["ARCHIVE_EXTENSION", "archive_path", "create_archive"]

ARCHIVE_EXTENSION = "tar.gz"


def archive_path(staging_dir: Path) -> Path:
    return staging_dir.parent / f"{staging_dir.name}.{ARCHIVE_EXTENSION}"


def _normalize(info: tarfile.TarInfo) -> tarfile.TarInfo:
    # Build-machine accounts have no meaning on the end user's machine.
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    return info


def create_archive(*, staging_dir: Path) -> Result[Path, ArchiveError]:
    """Compress ``staging_dir`` into ``<staging_dir>.tar.gz`` next to it.

    The staging directory is the archive's only top-level entry. The working
    directory is switched to the dist root for the duration of the write and
    restored on every exit path. A failed write leaves no file at the
    artifact path.
    """
    if not staging_dir.is_dir():
        return Err(ArchiveError(message=f"staging directory not found: {staging_dir}"))

    dist_dir = staging_dir.parent
    out = archive_path(staging_dir)

    try:
        with contextlib.chdir(dist_dir), atomic_output(Path(out.name)) as tmp:
            with (
                tmp.open("wb") as raw,
                gzip.GzipFile(filename=out.name, mode="wb", fileobj=raw, mtime=0) as gz,
                tarfile.open(fileobj=gz, mode="w", format=tarfile.PAX_FORMAT) as tar,
            ):
                tar.add(staging_dir.name, filter=_normalize)
    except (OSError, tarfile.TarError) as e:
        return Err(ArchiveError(message=f"cannot write {out}: {e}"))

    return Ok(out)
