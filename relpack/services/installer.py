"""MSI installer generation for Windows targets via cargo-wix.

The installer must put the install directory on the system-wide PATH so the
binary can be invoked from any new terminal. cargo-wix's generated template
does this with an ``<Environment Name='PATH' .../>`` element; a hand-edited
``wix/main.wxs`` that dropped it is rejected before the toolchain runs.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

from relpack.core.result import Err, Ok, Result
from relpack.output.console import ConsoleProtocol, Style
from relpack.platform.process import run as run_process
from relpack.platform.target import Target

from .errors import InstallerError

__all__ = ["installer_command", "installer_path", "build_installer", "registers_path"]

_INSTALLER_TIMEOUT_SECONDS = 15 * 60.0

_PATH_ENTRY_RE = re.compile(r"<Environment\b[^>]*\bName\s*=\s*['\"]PATH['\"]", re.IGNORECASE)

_INSTALL_HINT = "Install with: cargo install cargo-wix (requires the WiX Toolset)"


def installer_path(*, output_dir: Path, product: str, target: Target) -> Path:
    return output_dir / f"{product}-{target.triple}.msi"


def installer_command(*, package: str, target: Target, output: Path) -> list[str]:
    return [
        "cargo",
        "wix",
        "--no-build",
        "--nocapture",
        "--package",
        package,
        "--target",
        target.triple,
        "--output",
        str(output),
    ]


def registers_path(wxs: Path) -> bool:
    """True if the WiX source declares a PATH environment entry."""
    return _PATH_ENTRY_RE.search(wxs.read_text(encoding="utf-8", errors="replace")) is not None


def build_installer(
    *,
    project_root: Path,
    wxs_path: Path,
    output_dir: Path,
    product: str,
    package: str,
    target: Target,
    console: ConsoleProtocol,
    timeout: float = _INSTALLER_TIMEOUT_SECONDS,
) -> Result[Path, InstallerError]:
    """Generate ``<output_dir>/<product>-<target>.msi`` from an existing release build.

    An installer left by an earlier run is removed first, so every failure
    leaves no file at the output path.
    """
    output = installer_path(output_dir=output_dir, product=product, target=target)
    try:
        output.unlink(missing_ok=True)
    except OSError as e:
        return Err(InstallerError(message=f"cannot remove stale installer {output}: {e}"))

    if shutil.which("cargo-wix") is None:
        return Err(
            InstallerError(
                message="cargo-wix not found on PATH",
                returncode=-1,
                hint=_INSTALL_HINT,
            )
        )

    if not wxs_path.exists():
        init_cmd = ["cargo", "wix", "init", "--package", package]
        console.print(" ".join(init_cmd), Style.DIM)
        init = run_process(init_cmd, cwd=project_root, timeout=timeout)
        if isinstance(init, Err):
            return Err(InstallerError.from_process("cargo wix init failed", init.error))

    try:
        if not registers_path(wxs_path):
            return Err(
                InstallerError(
                    message=f"{wxs_path} does not add the install directory to PATH",
                    hint="add an <Environment Name='PATH' ... System='yes'/> component",
                )
            )
    except OSError as e:
        return Err(InstallerError(message=f"cannot read {wxs_path}: {e}"))

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return Err(InstallerError(message=f"cannot prepare {output_dir}: {e}"))

    cmd = installer_command(package=package, target=target, output=output)
    console.print(" ".join(cmd), Style.DIM)
    result = run_process(cmd, cwd=project_root, timeout=timeout)
    if isinstance(result, Err):
        return Err(InstallerError.from_process("cargo wix failed", result.error))

    if not output.is_file():
        return Err(
            InstallerError(
                message=f"cargo wix reported success but produced no installer at {output}",
                diagnostics=result.value.strip(),
            )
        )
    return Ok(output)
