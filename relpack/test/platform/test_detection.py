"""Tests for relpack.platform.detection module."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import patch

import pytest

from relpack.platform.detection import Arch, Platform, detect_arch, detect_platform


@pytest.fixture(autouse=True)
def _clear_caches() -> Iterator[None]:
    detect_platform.cache_clear()
    detect_arch.cache_clear()
    yield
    detect_platform.cache_clear()
    detect_arch.cache_clear()


class TestEnums:
    def test_str(self) -> None:
        assert str(Platform.MACOS) == "macos"
        assert str(Arch.ARM64) == "arm64"

    def test_triple_prefix(self) -> None:
        assert Arch.X64.triple_prefix == "x86_64"
        assert Arch.ARM64.triple_prefix == "aarch64"
        assert Arch.UNKNOWN.triple_prefix is None


class TestPlatformDetection:
    @pytest.mark.parametrize(
        ("sys_platform", "expected"),
        [
            ("linux", Platform.LINUX),
            ("darwin", Platform.MACOS),
            ("win32", Platform.WINDOWS),
            ("cygwin", Platform.WINDOWS),
            ("freebsd", Platform.UNKNOWN),
        ],
    )
    def test_detect(self, sys_platform: str, expected: Platform) -> None:
        with patch("sys.platform", sys_platform):
            assert detect_platform() == expected


class TestArchDetection:
    @pytest.mark.parametrize(
        ("machine", "expected"),
        [
            ("x86_64", Arch.X64),
            ("AMD64", Arch.X64),
            ("aarch64", Arch.ARM64),
            ("arm64", Arch.ARM64),
            ("riscv64", Arch.UNKNOWN),
        ],
    )
    def test_detect(self, machine: str, expected: Arch) -> None:
        with patch("sys.platform", "linux"), patch("platform.machine", return_value=machine):
            assert detect_arch() == expected

    def test_windows_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PROCESSOR_ARCHITEW6432", raising=False)
        monkeypatch.setenv("PROCESSOR_ARCHITECTURE", "ARM64")
        with patch("sys.platform", "win32"):
            assert detect_arch() == Arch.ARM64
