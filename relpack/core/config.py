"""Typed configuration loading and access.

This module provides dataclasses for the optional ``relpack.toml`` file at the
project root. Every field has a default, so a project without the file
packages with the standard layout (``target/dist``, ``target/wix``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "ProductConfig",
    "PathsConfig",
    "BuildConfig",
    "TargetsConfig",
    "CONFIG_FILENAME",
    "DEFAULT_MACOS_TARGET",
    "DEFAULT_WINDOWS_TARGET",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "relpack.toml"

DEFAULT_MACOS_TARGET = "aarch64-apple-darwin"
DEFAULT_WINDOWS_TARGET = "x86_64-pc-windows-msvc"

DEFAULT_BUILD_TIMEOUT_SECONDS = 30 * 60


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ProductConfig:
    """Identity of the product binary.

    ``name`` is the binary name used in artifact names; ``package`` is the
    package looked up in project metadata and defaults to ``name``.
    Both default to ``[package].name`` from ``Cargo.toml`` when unset.
    """

    name: str | None = None
    package: str | None = None


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Output directories, relative to the project root."""

    target: str = "target"
    dist: str = "target/dist"
    wix: str = "target/wix"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Release build settings passed to cargo as profile overrides."""

    lto: bool = True
    strip: bool = True
    codegen_units: int = 1
    locked: bool = False
    timeout: int = DEFAULT_BUILD_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class TargetsConfig:
    """Default target triple per host platform family.

    ``linux`` has no fixed default; it is derived from the host architecture.
    """

    macos: str = DEFAULT_MACOS_TARGET
    linux: str | None = None
    windows: str = DEFAULT_WINDOWS_TARGET


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    product: ProductConfig = field(default_factory=ProductConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    targets: TargetsConfig = field(default_factory=TargetsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a numeric setting is out of range.
        """
        product: StrDict = get_table(data, "product") or {}
        paths: StrDict = get_table(data, "paths") or {}
        build: StrDict = get_table(data, "build") or {}
        targets: StrDict = get_table(data, "targets") or {}

        codegen_units = get_int(build, "codegen_units")
        if codegen_units is not None and codegen_units < 1:
            raise ValueError(f"build.codegen_units must be >= 1, got {codegen_units}")
        timeout = get_int(build, "timeout")
        if timeout is not None and timeout <= 0:
            raise ValueError(f"build.timeout must be > 0, got {timeout}")

        lto = get_bool(build, "lto")
        strip = get_bool(build, "strip")
        locked = get_bool(build, "locked")

        return cls(
            product=ProductConfig(
                name=get_str(product, "name"),
                package=get_str(product, "package"),
            ),
            paths=PathsConfig(
                target=get_str(paths, "target") or "target",
                dist=get_str(paths, "dist") or "target/dist",
                wix=get_str(paths, "wix") or "target/wix",
            ),
            build=BuildConfig(
                lto=True if lto is None else lto,
                strip=True if strip is None else strip,
                codegen_units=codegen_units or 1,
                locked=False if locked is None else locked,
                timeout=timeout or DEFAULT_BUILD_TIMEOUT_SECONDS,
            ),
            targets=TargetsConfig(
                macos=get_str(targets, "macos") or DEFAULT_MACOS_TARGET,
                linux=get_str(targets, "linux"),
                windows=get_str(targets, "windows") or DEFAULT_WINDOWS_TARGET,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relpack.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, defaults otherwise.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
