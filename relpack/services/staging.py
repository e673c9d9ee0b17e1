"""Staging directory assembly.

The staging directory holds exactly the files that end up in the artifact.
It is rebuilt from scratch on every run, so an interrupted or older run can
never leak stale files into a new release.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from relpack.core.result import Err, Ok, Result
from relpack.platform.files import recreate_dir
from relpack.platform.target import Target

from .errors import StagingError

__all__ = ["artifact_basename", "assemble_staging", "staging_path"]


def artifact_basename(*, product: str, version: str, target: Target) -> str:
    """``<product>-<version>-<target>``: shared by staging dir and archive."""
    return f"{product}-{version}-{target.triple}"


def staging_path(*, dist_dir: Path, product: str, version: str, target: Target) -> Path:
    return dist_dir / artifact_basename(product=product, version=version, target=target)


def assemble_staging(
    *,
    dist_dir: Path,
    product: str,
    version: str,
    target: Target,
    binary: Path,
) -> Result[Path, StagingError]:
    """Recreate the staging directory and copy the built binary into it.

    A missing binary means the build step did not produce what it promised;
    that is reported before anything on disk is touched.
    """
    if not binary.is_file():
        return Err(
            StagingError(
                message=f"compiled binary not found: {binary}",
                hint="the release build reported success but produced no binary at this path",
            )
        )

    stage_dir = staging_path(dist_dir=dist_dir, product=product, version=version, target=target)
    try:
        recreate_dir(stage_dir)
        shutil.copy2(binary, stage_dir / binary.name)
        # Directory timestamp follows the binary so reruns archive identically.
        st = binary.stat()
        os.utime(stage_dir, ns=(st.st_atime_ns, st.st_mtime_ns))
    except OSError as e:
        return Err(StagingError(message=f"cannot assemble {stage_dir}: {e}"))

    return Ok(stage_dir)
