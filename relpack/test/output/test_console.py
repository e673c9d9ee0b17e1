"""Tests for relpack.output.console module."""

from __future__ import annotations

import pytest

from relpack.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DIM) == "dim"


class TestMockConsole:
    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("cargo build --release", Style.DIM)
        assert console.outputs[0].message == "cargo build --release"
        assert console.outputs[0].style == Style.DIM

    def test_success_and_error(self) -> None:
        console = MockConsole()
        console.success("Created archive")
        console.error("staging failed")
        assert console.messages == ["OK Created archive", "error: staging failed"]
        assert console.has_success()
        assert console.has_error()

    def test_diagnostic_is_verbatim(self) -> None:
        console = MockConsole()
        console.diagnostic("error[E0425]: cannot find value `x`")
        assert console.text == "error[E0425]: cannot find value `x`"

    def test_find(self) -> None:
        console = MockConsole()
        console.info("version 1.2.0")
        console.info("Contents staged under target/dist")
        assert len(console.find("staged")) == 1

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.header("Packaging")


class TestRichConsole:
    def test_error_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.error("build failed")
        captured = capsys.readouterr()
        assert "build failed" in captured.err
        assert "build failed" not in captured.out

    def test_diagnostic_keeps_brackets(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.diagnostic("error[E0425]: cannot find value")
        assert "error[E0425]" in capsys.readouterr().err

    def test_success_escapes_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.success("Created [bold]archive")
        assert "[bold]archive" in capsys.readouterr().out
