from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from buildkeeper.cli import cli, main, _configure_logging
from buildkeeper.__version__ import __version__

APPVEYOR_ENV = {
    "APPVEYOR_BUILD_VERSION": None,
    "APPVEYOR_REPO_BRANCH": None,
    "APPVEYOR_API_URL": None,
    "BUILDKEEPER_CONFIG": None,
}


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every CLI test in an empty directory (no config discovered)."""
    monkeypatch.chdir(tmp_path)
    for name in APPVEYOR_ENV:
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.mark.unit
class TestCliGroup:
    """Tests for the top-level click group."""

    def test_version_option(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert f"buildkeeper {__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        result = CliRunner().invoke(cli, ["-h"])

        assert result.exit_code == 0
        assert "version" in result.output
        assert "package-exists" in result.output

    def test_config_file_applies(self, isolated_cwd: Path) -> None:
        (isolated_cwd / "buildkeeper.toml").write_text(
            "[buildkeeper]\ninclude_build_metadata = false\n", encoding="utf-8"
        )

        result = CliRunner().invoke(
            cli, ["version", "--raw-version", "2.0.0.10", "--branch", "master"]
        )

        assert result.exit_code == 0
        assert "2.0.0\n" in result.output
        assert "+build" not in result.output

    def test_invalid_config_exits_one(self, isolated_cwd: Path) -> None:
        (isolated_cwd / "buildkeeper.toml").write_text(
            "[buildkeeper]\nunknown_option = 1\n", encoding="utf-8"
        )

        result = CliRunner().invoke(
            cli, ["version", "--raw-version", "2.0.0.10", "--branch", "master"]
        )

        assert result.exit_code == 1
        assert "Unknown configuration keys" in result.output

    def test_explicit_config_option(self, isolated_cwd: Path) -> None:
        config = isolated_cwd / "ci.toml"
        config.write_text("[buildkeeper]\ninclude_build_metadata = false\n", encoding="utf-8")

        result = CliRunner().invoke(
            cli,
            ["-c", str(config), "version", "--raw-version", "3.0.0.11", "--branch", "dev"],
        )

        assert result.exit_code == 0
        assert "3.0.0-pre.11\n" in result.output


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for verbosity mapping."""

    @pytest.mark.parametrize(
        "verbose, level",
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_levels(self, verbose: int, level: int) -> None:
        _configure_logging(verbose)

        assert logging.getLogger("buildkeeper").level == level


@pytest.mark.unit
class TestMain:
    """Tests for main() exit code mapping."""

    def test_success(self, capsys: pytest.CaptureFixture) -> None:
        argv = ["buildkeeper", "version", "--raw-version", "2.0.0.10", "--branch", "master"]

        with patch("sys.argv", argv):
            assert main() == 0

        assert capsys.readouterr().out == "2.0.0+build.10\n"

    def test_invalid_input_returns_one(self, capsys: pytest.CaptureFixture) -> None:
        argv = ["buildkeeper", "version", "--raw-version", "2.0.0", "--branch", "master"]

        with patch("sys.argv", argv):
            assert main() == 1

        assert "Invalid build version" in capsys.readouterr().err

    def test_usage_error_returns_two(self) -> None:
        with patch("sys.argv", ["buildkeeper", "no-such-command"]):
            assert main() == 2

    def test_version_flag_returns_zero(self, capsys: pytest.CaptureFixture) -> None:
        with patch("sys.argv", ["buildkeeper", "--version"]):
            assert main() == 0

        assert __version__ in capsys.readouterr().out

    def test_keyboard_interrupt_returns_130(self) -> None:
        with patch("buildkeeper.cli.cli", side_effect=KeyboardInterrupt):
            assert main() == 130

    def test_unexpected_error_returns_one(self, capsys: pytest.CaptureFixture) -> None:
        with patch("buildkeeper.cli.cli", side_effect=RuntimeError("kaboom")):
            assert main() == 1

        assert "Unexpected error: kaboom" in capsys.readouterr().err
