from __future__ import annotations

from pathlib import Path

import pytest

from relpack.core.config import BuildConfig
from relpack.core.result import Err, Ok, Result
from relpack.output.console import MockConsole
from relpack.platform.process import ProcessError
from relpack.platform.target import Target
from relpack.services import build as build_mod
from relpack.services.build import binary_path, build_command, build_env, build_release
from relpack.services.errors import BuildError

MAC = Target("aarch64-apple-darwin")
WIN = Target("x86_64-pc-windows-msvc")


class _Recorder:
    def __init__(self, response: Result[str, ProcessError]) -> None:
        self.response = response
        self.calls: list[tuple[list[str], Path, dict[str, str] | None]] = []

    def __call__(
        self,
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        del timeout
        self.calls.append((cmd, cwd, env))
        return self.response


@pytest.fixture(autouse=True)
def _cargo_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(build_mod.shutil, "which", lambda name: f"/usr/bin/{name}")


def test_build_command() -> None:
    assert build_command(MAC, BuildConfig()) == [
        "cargo",
        "build",
        "--release",
        "--target",
        "aarch64-apple-darwin",
    ]


def test_build_command_locked() -> None:
    assert build_command(MAC, BuildConfig(locked=True))[-1] == "--locked"


def test_build_env_requests_lto_and_strip() -> None:
    assert build_env(BuildConfig()) == {
        "CARGO_PROFILE_RELEASE_LTO": "true",
        "CARGO_PROFILE_RELEASE_STRIP": "symbols",
        "CARGO_PROFILE_RELEASE_CODEGEN_UNITS": "1",
    }


def test_build_env_respects_disabled_settings() -> None:
    env = build_env(BuildConfig(lto=False, strip=False, codegen_units=16))
    assert env == {"CARGO_PROFILE_RELEASE_CODEGEN_UNITS": "16"}


def test_binary_path(tmp_path: Path) -> None:
    assert binary_path(target_dir=tmp_path, product="report-builder", target=MAC) == (
        tmp_path / "aarch64-apple-darwin" / "release" / "report-builder"
    )
    assert binary_path(target_dir=tmp_path, product="report-builder", target=WIN) == (
        tmp_path / "x86_64-pc-windows-msvc" / "release" / "report-builder.exe"
    )


def test_build_release_success(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    recorder = _Recorder(Ok(""))
    monkeypatch.setattr(build_mod, "run_process", recorder)
    console = MockConsole()

    result = build_release(
        project_root=tmp_path,
        target_dir=tmp_path / "target",
        product="report-builder",
        target=MAC,
        settings=BuildConfig(),
        console=console,
    )

    assert result == Ok(tmp_path / "target" / "aarch64-apple-darwin" / "release" / "report-builder")
    cmd, cwd, env = recorder.calls[0]
    assert cmd[:3] == ["cargo", "build", "--release"]
    assert cwd == tmp_path
    assert env is not None
    assert env["CARGO_PROFILE_RELEASE_LTO"] == "true"
    assert env["CARGO_TARGET_DIR"] == str(tmp_path / "target")
    assert console.find("cargo build --release --target aarch64-apple-darwin")


def test_build_release_failure_propagates_status(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    stderr = "error[E0463]: can't find crate for `core`\n  = note: the target may not be installed"
    recorder = _Recorder(
        Err(ProcessError(command=("cargo", "build"), returncode=101, stdout="", stderr=stderr))
    )
    monkeypatch.setattr(build_mod, "run_process", recorder)

    result = build_release(
        project_root=tmp_path,
        target_dir=tmp_path / "target",
        product="report-builder",
        target=MAC,
        settings=BuildConfig(),
        console=MockConsole(),
    )

    assert isinstance(result, Err)
    assert isinstance(result.error, BuildError)
    assert result.error.returncode == 101
    assert "can't find crate for `core`" in result.error.diagnostics
    assert result.error.hint == "is the target installed? rustup target add aarch64-apple-darwin"


def test_build_release_without_cargo(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(build_mod.shutil, "which", lambda name: None)
    recorder = _Recorder(Ok(""))
    monkeypatch.setattr(build_mod, "run_process", recorder)

    result = build_release(
        project_root=tmp_path,
        target_dir=tmp_path / "target",
        product="report-builder",
        target=MAC,
        settings=BuildConfig(),
        console=MockConsole(),
    )

    assert isinstance(result, Err)
    assert result.error.returncode == -1
    assert recorder.calls == []
