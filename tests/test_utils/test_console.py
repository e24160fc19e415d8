from __future__ import annotations

import sys
from typing import Generator
from unittest.mock import patch

import pytest
from rich.console import Console

from buildkeeper.utils.console import (
    BUILDKEEPER_THEME,
    _get_console,
    _should_use_color,
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)


@pytest.fixture(autouse=True)
def reset_console(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Start every test with fresh, colorless consoles."""
    monkeypatch.setenv("NO_COLOR", "1")
    reconfigure_console()
    yield
    reconfigure_console()


@pytest.mark.unit
class TestTheme:
    """Tests for BUILDKEEPER_THEME."""

    @pytest.mark.parametrize("style", ["success", "error", "warning", "info", "dim"])
    def test_theme_has_style(self, style: str) -> None:
        assert style in BUILDKEEPER_THEME.styles


@pytest.mark.unit
class TestShouldUseColor:
    """Tests for _should_use_color."""

    def test_no_color(self) -> None:
        assert _should_use_color(sys.stdout) is False

    def test_appveyor(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR")
        monkeypatch.setenv("APPVEYOR", "True")

        assert _should_use_color(sys.stdout) is True

    def test_generic_ci(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR")
        monkeypatch.delenv("APPVEYOR", raising=False)
        monkeypatch.setenv("CI", "1")

        assert _should_use_color(sys.stdout) is False

    def test_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR")
        monkeypatch.delenv("APPVEYOR", raising=False)
        monkeypatch.delenv("CI", raising=False)

        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color(sys.stdout) is True

    def test_stream_without_isatty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR")
        monkeypatch.delenv("APPVEYOR", raising=False)
        monkeypatch.delenv("CI", raising=False)

        assert _should_use_color(object()) is False


@pytest.mark.unit
class TestConsoleLifecycle:
    """Tests for console singletons."""

    def test_singleton_per_stream(self) -> None:
        assert _get_console() is _get_console()
        assert _get_console(stderr=True) is _get_console(stderr=True)
        assert _get_console() is not _get_console(stderr=True)

    def test_stderr_console(self) -> None:
        assert _get_console(stderr=True).stderr is True
        assert _get_console().stderr is False

    def test_reconfigure_drops_instances(self) -> None:
        first = _get_console()
        reconfigure_console()

        assert _get_console() is not first

    def test_get_raw_console(self) -> None:
        assert isinstance(get_raw_console(), Console)
        assert get_raw_console(stderr=True) is _get_console(stderr=True)


@pytest.mark.unit
class TestStatusMessages:
    """Tests for print_success / print_error / print_warning."""

    def test_messages_go_to_stderr(self, capsys: pytest.CaptureFixture) -> None:
        print_success("done")
        print_warning("careful")
        print_error("broken")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[OK] done" in captured.err
        assert "[WARNING] careful" in captured.err
        assert "[ERROR] broken" in captured.err

    def test_custom_prefix(self, capsys: pytest.CaptureFixture) -> None:
        print_error("broken", prefix="!!")

        assert "!! broken" in capsys.readouterr().err


@pytest.mark.unit
class TestPrintTable:
    """Tests for print_table."""

    def test_renders_rows_on_stdout(self, capsys: pytest.CaptureFixture) -> None:
        print_table(
            [{"Field": "Version", "Value": "2.0.0+build.10"}],
            title="Derived Version",
        )

        out = capsys.readouterr().out
        assert "Derived Version" in out
        assert "2.0.0+build.10" in out

    def test_header_order(self, capsys: pytest.CaptureFixture) -> None:
        print_table([{"A": "1", "B": "2"}], headers=["B", "A"])

        out = capsys.readouterr().out
        assert out.index("B") < out.index("A")

    def test_empty_data_prints_nothing(self, capsys: pytest.CaptureFixture) -> None:
        print_table([])

        assert capsys.readouterr().out == ""
