from __future__ import annotations

from pathlib import Path

import pytest

from relpack.services import build as build_mod
from relpack.services import installer as installer_mod
from relpack.services import version as version_mod

from ._toolchain import FakeToolchain


@pytest.fixture
def toolchain(monkeypatch: pytest.MonkeyPatch) -> FakeToolchain:
    fake = FakeToolchain()
    for mod in (version_mod, build_mod, installer_mod):
        monkeypatch.setattr(mod, "run_process", fake)
    monkeypatch.setattr(build_mod.shutil, "which", lambda name: f"/usr/bin/{name}")
    return fake


@pytest.fixture
def cargo_project(tmp_path: Path) -> Path:
    root = tmp_path / "report-builder"
    root.mkdir()
    (root / "Cargo.toml").write_text('[package]\nname = "report-builder"\nversion = "1.2.0"\n')
    return root
