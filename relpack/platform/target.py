"""Target descriptors (platform triples).

A target triple such as ``aarch64-apple-darwin`` names the OS and CPU pair a
release is built and packaged for. It ends up inside artifact file names, so
it is validated before anything touches the filesystem.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from relpack.core.config import TargetsConfig
from relpack.core.result import Err, Ok, Result

from .detection import Arch, Platform

__all__ = [
    "PlatformFamily",
    "Target",
    "TargetError",
    "default_target",
    "parse_target",
]

_TRIPLE_RE = re.compile(r"^[A-Za-z0-9_.]+(?:-[A-Za-z0-9_.]+)+$")


class PlatformFamily(Enum):
    """Packaging family: decides between an archive and an installer."""

    UNIX = "unix"
    WINDOWS = "windows"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TargetError:
    raw: str
    message: str


@dataclass(frozen=True, slots=True)
class Target:
    """A validated target triple."""

    triple: str

    @property
    def components(self) -> tuple[str, ...]:
        return tuple(self.triple.split("-"))

    @property
    def arch(self) -> str:
        return self.components[0]

    @property
    def family(self) -> PlatformFamily:
        if "windows" in self.components:
            return PlatformFamily.WINDOWS
        return PlatformFamily.UNIX

    @property
    def is_windows(self) -> bool:
        return self.family == PlatformFamily.WINDOWS

    @property
    def exe_suffix(self) -> str:
        return ".exe" if self.is_windows else ""

    def exe_name(self, name: str) -> str:
        """Executable file name for this target.

        Example: exe_name("report-builder") -> "report-builder.exe" on Windows targets.
        """
        return f"{name}{self.exe_suffix}"

    def __str__(self) -> str:
        return self.triple


def parse_target(raw: str) -> Result[Target, TargetError]:
    triple = raw.strip()
    if not triple:
        return Err(TargetError(raw=raw, message="target triple is empty"))
    if not _TRIPLE_RE.match(triple):
        return Err(
            TargetError(
                raw=raw,
                message=(
                    f"invalid target triple: {raw!r} "
                    "(expected dash-separated components like aarch64-apple-darwin)"
                ),
            )
        )
    return Ok(Target(triple=triple))


def default_target(
    targets: TargetsConfig, *, platform: Platform, arch: Arch
) -> Result[str, TargetError]:
    """Default triple for the host: fixed per platform family, overridable in config.

    On Linux the architecture comes from the host; an architecture relpack
    cannot name is an error rather than a silent cross build.
    """
    match platform:
        case Platform.WINDOWS:
            return Ok(targets.windows)
        case Platform.MACOS:
            return Ok(targets.macos)
        case Platform.LINUX:
            if targets.linux:
                return Ok(targets.linux)
            prefix = arch.triple_prefix
            if prefix is None:
                return Err(
                    TargetError(
                        raw="",
                        message=(
                            f"cannot derive a default target for host architecture {arch}; "
                            "pass TARGET or set [targets] linux in relpack.toml"
                        ),
                    )
                )
            return Ok(f"{prefix}-unknown-linux-gnu")
        case _:
            return Err(
                TargetError(
                    raw="",
                    message=f"no default target for host platform {platform}; pass TARGET",
                )
            )
