"""Error types for the packaging pipeline.

One error type per pipeline stage. Each carries the tool's exit status and
captured output verbatim so the operator sees exactly what the toolchain said.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Self

from relpack.platform.process import ProcessError

__all__ = [
    "StageFailure",
    "MetadataError",
    "BuildError",
    "StagingError",
    "ArchiveError",
    "InstallerError",
    "PackageError",
]


@dataclass(frozen=True, slots=True)
class StageFailure:
    message: str
    returncode: int | None = None
    diagnostics: str = ""
    hint: str | None = None

    stage: ClassVar[str] = "packaging"

    @classmethod
    def from_process(cls, message: str, error: ProcessError, *, hint: str | None = None) -> Self:
        return cls(
            message=f"{message} (exit {error.returncode})",
            returncode=error.returncode,
            diagnostics=error.diagnostics,
            hint=hint,
        )

    def pretty(self) -> str:
        return f"{self.stage} failed: {self.message}"


@dataclass(frozen=True, slots=True)
class MetadataError(StageFailure):
    stage: ClassVar[str] = "version resolution"


@dataclass(frozen=True, slots=True)
class BuildError(StageFailure):
    stage: ClassVar[str] = "release build"


@dataclass(frozen=True, slots=True)
class StagingError(StageFailure):
    stage: ClassVar[str] = "staging"


@dataclass(frozen=True, slots=True)
class ArchiveError(StageFailure):
    stage: ClassVar[str] = "archiving"


@dataclass(frozen=True, slots=True)
class InstallerError(StageFailure):
    stage: ClassVar[str] = "installer generation"


PackageError = MetadataError | BuildError | StagingError | ArchiveError | InstallerError
