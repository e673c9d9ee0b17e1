from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import typer

from relpack import __version__
from relpack.cli.context import build_context
from relpack.core.errors import ErrorCode
from relpack.core.result import Err, Ok
from relpack.output.console import Style
from relpack.output.errors import package_error_exit_code, print_package_error
from relpack.platform.target import default_target, parse_target
from relpack.services.pipeline import PackagingPipeline

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.command()
def package(
    target: str | None = typer.Argument(
        None,
        help="Target triple (default: aarch64-apple-darwin on macOS, "
        "x86_64-pc-windows-msvc on Windows, <arch>-unknown-linux-gnu on Linux)",
        show_default=False,
    ),
    project: Path | None = typer.Option(
        None,
        "--project",
        help="Project root containing Cargo.toml (overrides auto detection)",
        show_default=False,
    ),
    locked: bool = typer.Option(False, "--locked", help="Pass --locked to cargo build"),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Build the product binary for TARGET and package it for release."""
    del version
    ctx = build_context(project)
    config = ctx.project.config

    if target is not None:
        parsed = parse_target(target)
    else:
        parsed = default_target(config.targets, platform=ctx.platform, arch=ctx.arch).flat_map(
            parse_target
        )
    if isinstance(parsed, Err):
        ctx.console.error(parsed.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    identity = ctx.project.product_name().flat_map(
        lambda name: ctx.project.package_name().map(lambda pkg: (name, pkg))
    )
    if isinstance(identity, Err):
        ctx.console.error(identity.error.message)
        if identity.error.hint:
            ctx.console.print(f"hint: {identity.error.hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    product, package_name = identity.value

    settings = replace(config.build, locked=True) if locked else config.build
    pipeline = PackagingPipeline(
        project=ctx.project,
        product=product,
        package=package_name,
        target=parsed.value,
        console=ctx.console,
        build_settings=settings,
    )

    match pipeline.run():
        case Ok(_):
            return
        case Err(error):
            print_package_error(error, ctx.console)
            raise typer.Exit(code=package_error_exit_code(error))


def main() -> None:
    app()
