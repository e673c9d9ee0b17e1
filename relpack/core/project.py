"""Project detection and paths.

The project is the Rust crate (or cargo workspace) whose binary is packaged.
It is identified by a ``Cargo.toml`` manifest at its root.

All output paths (``target/dist``, ``target/wix``) are resolved against the
project root, never against the process working directory, so the pipeline
behaves the same wherever it is launched from.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .config import CONFIG_FILENAME, Config
from .result import Err, Ok, Result
from .structured import as_str_dict, get_str, get_table

__all__ = [
    "Project",
    "ProjectError",
    "PROJECT_ROOT_ENV",
    "detect_project",
    "find_project_upward",
    "is_project_root",
    "read_package_name",
]

PROJECT_ROOT_ENV = "RELPACK_PROJECT_ROOT"
MANIFEST_FILENAME = "Cargo.toml"


@dataclass(frozen=True)
class ProjectError:
    """Error when the project root or product identity cannot be determined."""

    message: str
    searched_from: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A detected cargo project plus its packaging configuration."""

    root: Path
    config: Config = field(default_factory=Config)

    @property
    def manifest_path(self) -> Path:
        """Path to Cargo.toml."""
        return self.root / MANIFEST_FILENAME

    @property
    def config_path(self) -> Path:
        """Path to relpack.toml (may not exist)."""
        return self.root / CONFIG_FILENAME

    @property
    def target_dir(self) -> Path:
        """Cargo target directory."""
        return self.root / self.config.paths.target

    @property
    def dist_dir(self) -> Path:
        """Dist root holding staging directories and archives."""
        return self.root / self.config.paths.dist

    @property
    def wix_dir(self) -> Path:
        """Installer output directory."""
        return self.root / self.config.paths.wix

    @property
    def wxs_path(self) -> Path:
        """WiX source consumed by cargo-wix."""
        return self.root / "wix" / "main.wxs"

    def product_name(self) -> Result[str, ProjectError]:
        """Binary name: config first, then ``[package].name`` in Cargo.toml."""
        if self.config.product.name:
            return Ok(self.config.product.name)

        name = read_package_name(self.manifest_path)
        if name is None:
            return Err(
                ProjectError(
                    f"cannot determine product name from {self.manifest_path}",
                    searched_from=self.root,
                    hint=f'set [product] name = "..." in {CONFIG_FILENAME}',
                )
            )
        return Ok(name)

    def package_name(self) -> Result[str, ProjectError]:
        """Package looked up in project metadata (defaults to the product name)."""
        if self.config.product.package:
            return Ok(self.config.product.package)
        return self.product_name()

    def __str__(self) -> str:
        return str(self.root)


def is_project_root(path: Path) -> bool:
    return (path / MANIFEST_FILENAME).is_file()


def find_project_upward(start: Path) -> Path | None:
    """Search upward from start directory for a project root.

    Returns the project root path if found, None otherwise.
    """
    for parent in (start, *start.parents):
        if is_project_root(parent):
            return parent
    return None


def read_package_name(manifest: Path) -> str | None:
    """Return ``[package].name`` from a Cargo.toml, or None if unavailable."""
    try:
        data = as_str_dict(tomllib.loads(manifest.read_text(encoding="utf-8")))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        return None
    if data is None:
        return None
    package = get_table(data, "package")
    if package is None:
        return None
    return get_str(package, "name")


def detect_project(
    *,
    start_dir: Path | None = None,
    env_var: str = PROJECT_ROOT_ENV,
) -> Result[Path, ProjectError]:
    """Detect the project root directory.

    Detection order:
    1. RELPACK_PROJECT_ROOT environment variable (if set)
    2. Search upward from start_dir (or cwd) for Cargo.toml
    """
    env_value = os.environ.get(env_var)
    if env_value:
        root = Path(env_value).expanduser().resolve()
        if is_project_root(root):
            return Ok(root)
        return Err(
            ProjectError(
                f"{env_var} points to {root}, which has no {MANIFEST_FILENAME}",
                searched_from=root,
            )
        )

    start = (start_dir or Path.cwd()).resolve()
    found = find_project_upward(start)
    if found is None:
        return Err(
            ProjectError(
                f"no {MANIFEST_FILENAME} found in {start} or any parent directory",
                searched_from=start,
                hint=f"run relpack inside the project or pass --project / set {env_var}",
            )
        )
    return Ok(found)
