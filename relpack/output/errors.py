"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relpack.core.errors import ErrorCode
from relpack.services.errors import (
    ArchiveError,
    BuildError,
    InstallerError,
    MetadataError,
    PackageError,
    StagingError,
)

if TYPE_CHECKING:
    from relpack.output.console import ConsoleProtocol

__all__ = ["print_package_error", "package_error_exit_code"]


def print_package_error(error: PackageError, console: ConsoleProtocol) -> None:
    """Print the failing stage, the reason, then the tool's own output."""
    console.error(error.pretty())
    if error.diagnostics:
        console.diagnostic(error.diagnostics)
    if error.hint:
        console.diagnostic(f"hint: {error.hint}")


def package_error_exit_code(error: PackageError) -> int:
    match error:
        case MetadataError():
            return int(ErrorCode.ENV_ERROR)
        case BuildError() | InstallerError():
            return int(ErrorCode.BUILD_ERROR)
        case StagingError() | ArchiveError():
            return int(ErrorCode.IO_ERROR)
