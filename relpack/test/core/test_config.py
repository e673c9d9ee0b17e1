"""Tests for relpack.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from relpack.core.config import (
    DEFAULT_BUILD_TIMEOUT_SECONDS,
    BuildConfig,
    Config,
    PathsConfig,
    TargetsConfig,
    load_config,
    load_config_or_default,
)
from relpack.core.result import Err, Ok


class TestDefaults:
    def test_paths(self) -> None:
        paths = PathsConfig()
        assert paths.target == "target"
        assert paths.dist == "target/dist"
        assert paths.wix == "target/wix"

    def test_build_requests_small_binaries(self) -> None:
        build = BuildConfig()
        assert build.lto is True
        assert build.strip is True
        assert build.codegen_units == 1
        assert build.locked is False
        assert build.timeout == DEFAULT_BUILD_TIMEOUT_SECONDS

    def test_targets(self) -> None:
        targets = TargetsConfig()
        assert targets.macos == "aarch64-apple-darwin"
        assert targets.windows == "x86_64-pc-windows-msvc"
        assert targets.linux is None

    def test_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.paths = PathsConfig()  # type: ignore[misc]


class TestFromDict:
    def test_empty_dict_gives_defaults(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_full_config(self) -> None:
        config = Config.from_dict(
            {
                "product": {"name": "report-builder", "package": "report-builder-cli"},
                "paths": {"dist": "out/dist", "wix": "out/wix"},
                "build": {"lto": False, "strip": False, "codegen_units": 4, "locked": True},
                "targets": {"linux": "x86_64-unknown-linux-musl"},
            }
        )
        assert config.product.name == "report-builder"
        assert config.product.package == "report-builder-cli"
        assert config.paths.dist == "out/dist"
        assert config.paths.target == "target"
        assert config.build.lto is False
        assert config.build.strip is False
        assert config.build.codegen_units == 4
        assert config.build.locked is True
        assert config.targets.linux == "x86_64-unknown-linux-musl"
        assert config.targets.macos == "aarch64-apple-darwin"

    def test_wrong_types_fall_back_to_defaults(self) -> None:
        config = Config.from_dict({"build": {"lto": "yes", "codegen_units": True}})
        assert config.build.lto is True
        assert config.build.codegen_units == 1

    def test_codegen_units_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="codegen_units"):
            Config.from_dict({"build": {"codegen_units": 0}})


class TestLoadConfig:
    def test_load_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "relpack.toml"
        path.write_text('[product]\nname = "report-builder"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.product.name == "report-builder"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "relpack.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "relpack.toml"
        path.write_text("[product\nname = ", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path

    def test_invalid_structure(self, tmp_path: Path) -> None:
        path = tmp_path / "relpack.toml"
        path.write_text("[build]\ntimeout = -5\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid config structure" in result.error.message


class TestLoadConfigOrDefault:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config_or_default(tmp_path / "relpack.toml") == Ok(Config())

    def test_broken_file_is_still_an_error(self, tmp_path: Path) -> None:
        path = tmp_path / "relpack.toml"
        path.write_text("not toml at all [", encoding="utf-8")
        assert isinstance(load_config_or_default(path), Err)
