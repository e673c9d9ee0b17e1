"""Release build of the product binary via cargo.

Size reduction (LTO, symbol stripping, a single codegen unit) is requested
through cargo's ``CARGO_PROFILE_RELEASE_*`` environment overrides, so the
project's own Cargo.toml profile does not need to be edited.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from relpack.core.config import BuildConfig
from relpack.core.result import Err, Ok, Result
from relpack.output.console import ConsoleProtocol, Style
from relpack.platform.process import run as run_process
from relpack.platform.target import Target

from .errors import BuildError

__all__ = ["binary_path", "build_command", "build_env", "build_release"]


def build_command(target: Target, settings: BuildConfig) -> list[str]:
    cmd = ["cargo", "build", "--release", "--target", target.triple]
    if settings.locked:
        cmd.append("--locked")
    return cmd


def build_env(settings: BuildConfig) -> dict[str, str]:
    """Profile overrides for the release build (merged over the current env)."""
    env: dict[str, str] = {}
    if settings.lto:
        env["CARGO_PROFILE_RELEASE_LTO"] = "true"
    if settings.strip:
        env["CARGO_PROFILE_RELEASE_STRIP"] = "symbols"
    env["CARGO_PROFILE_RELEASE_CODEGEN_UNITS"] = str(settings.codegen_units)
    return env


def binary_path(*, target_dir: Path, product: str, target: Target) -> Path:
    """Where cargo places the release binary for ``target``."""
    return target_dir / target.triple / "release" / target.exe_name(product)


def build_release(
    *,
    project_root: Path,
    target_dir: Path,
    product: str,
    target: Target,
    settings: BuildConfig,
    console: ConsoleProtocol,
) -> Result[Path, BuildError]:
    """Build the product binary in release mode for ``target``.

    Returns:
        Ok(path) with the expected binary location (existence is checked by staging)
        Err(BuildError) with cargo's exit status and diagnostics on failure
    """
    if shutil.which("cargo") is None:
        return Err(
            BuildError(
                message="cargo not found on PATH",
                returncode=-1,
                hint="Install Rust via https://rustup.rs/",
            )
        )

    cmd = build_command(target, settings)
    overrides = build_env(settings)
    env = {**os.environ, **overrides, "CARGO_TARGET_DIR": str(target_dir)}

    console.print(" ".join(cmd), Style.DIM)
    result = run_process(cmd, cwd=project_root, env=env, timeout=float(settings.timeout))
    if isinstance(result, Err):
        return Err(
            BuildError.from_process(
                f"cargo build failed for {target}",
                result.error,
                hint=f"is the target installed? rustup target add {target}",
            )
        )

    return Ok(binary_path(target_dir=target_dir, product=product, target=target))
