"""Version resolution from cargo project metadata."""

from __future__ import annotations

import json
import re
from pathlib import Path

from relpack.core.result import Err, Ok, Result
from relpack.core.structured import StrDict, as_str_dict, get_list, get_str
from relpack.platform.process import run as run_process

from .errors import MetadataError

__all__ = ["METADATA_COMMAND", "resolve_version", "select_package_version"]

METADATA_COMMAND = ("cargo", "metadata", "--format-version", "1", "--no-deps")

_METADATA_TIMEOUT_SECONDS = 5 * 60.0

_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


def resolve_version(*, project_root: Path, package: str) -> Result[str, MetadataError]:
    """Return the version of ``package`` as declared in the project metadata.

    The query is read-only. Nothing is built or written.
    """
    out = run_process(list(METADATA_COMMAND), cwd=project_root, timeout=_METADATA_TIMEOUT_SECONDS)
    if isinstance(out, Err):
        return Err(
            MetadataError.from_process(
                "cargo metadata failed",
                out.error,
                hint="check that cargo is on PATH and Cargo.toml is valid",
            )
        )
    return _parse_metadata(out.value).flat_map(
        lambda packages: select_package_version(packages, package)
    )


def _parse_metadata(raw: str) -> Result[list[StrDict], MetadataError]:
    try:
        data = as_str_dict(json.loads(raw))
    except json.JSONDecodeError as e:
        return Err(MetadataError(message=f"cargo metadata returned invalid JSON: {e}"))
    if data is None:
        return Err(MetadataError(message="cargo metadata returned a non-object document"))

    packages = get_list(data, "packages")
    if packages is None:
        return Err(MetadataError(message="cargo metadata output has no 'packages' list"))
    return Ok([p for p in (as_str_dict(item) for item in packages) if p is not None])


def select_package_version(packages: list[StrDict], name: str) -> Result[str, MetadataError]:
    """Pick the version of the single package named ``name``.

    Duplicate names are rejected rather than resolved by position.
    """
    matches = [p for p in packages if get_str(p, "name") == name]
    if not matches:
        available = sorted({n for n in (get_str(p, "name") for p in packages) if n})
        return Err(
            MetadataError(
                message=f"package '{name}' not found in project metadata",
                hint=f"available: {', '.join(available)}" if available else None,
            )
        )
    if len(matches) > 1:
        return Err(
            MetadataError(
                message=f"package '{name}' appears {len(matches)} times in project metadata",
            )
        )

    version = get_str(matches[0], "version")
    if version is None:
        return Err(MetadataError(message=f"package '{name}' has no version"))
    if not _SEMVER_RE.match(version):
        return Err(MetadataError(message=f"package '{name}' has invalid version '{version}'"))
    return Ok(version)
