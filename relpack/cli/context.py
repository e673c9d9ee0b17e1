from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relpack.core.config import load_config_or_default
from relpack.core.errors import ErrorCode
from relpack.core.project import Project, detect_project, is_project_root
from relpack.core.result import Err
from relpack.output.console import ConsoleProtocol, RichConsole, Style
from relpack.platform.detection import Arch, Platform, detect_arch, detect_platform


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    platform: Platform
    arch: Arch
    console: ConsoleProtocol


def _resolve_root(project_dir: Path | None, console: ConsoleProtocol) -> Path:
    if project_dir is not None:
        try:
            root = project_dir.expanduser().resolve()
        except OSError as e:
            console.error(f"invalid --project: {e}")
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        if not is_project_root(root):
            console.error(f"--project '{root}' is not a cargo project (missing Cargo.toml)")
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
        return root

    detected = detect_project()
    if isinstance(detected, Err):
        console.error(detected.error.message)
        if detected.error.hint:
            console.print(f"hint: {detected.error.hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    return detected.value


def build_context(project_dir: Path | None = None) -> CLIContext:
    console = RichConsole()
    root = _resolve_root(project_dir, console)

    config = load_config_or_default(root / "relpack.toml")
    if isinstance(config, Err):
        console.error(config.error.message)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        project=Project(root=root, config=config.value),
        platform=detect_platform(),
        arch=detect_arch(),
        console=console,
    )
