from __future__ import annotations

import json
from pathlib import Path
from typing import List
from unittest.mock import patch

import httpx
import pytest
from click.testing import CliRunner

from buildkeeper.cli import cli
from buildkeeper.utils.http import HTTPClient


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    for name in (
        "APPVEYOR_BUILD_VERSION",
        "APPVEYOR_REPO_BRANCH",
        "APPVEYOR_API_URL",
        "BUILDKEEPER_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def invoke(*args: str, env=None):
    return CliRunner().invoke(cli, ["version", *args], env=env)


def worker_client(status_code: int, requests: List[httpx.Request]) -> HTTPClient:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code)

    client = HTTPClient(max_retries=0)
    client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client


@pytest.mark.unit
class TestVersionCommand:
    """Tests for ``buildkeeper version``."""

    @pytest.mark.parametrize(
        "raw_version, branch, expected",
        [
            ("2.0.0.10", "master", "2.0.0+build.10"),
            ("3.0.0.11", "dev", "3.0.0-pre.11+build.11"),
            (
                "4.0.1.12",
                "feature/YYY-123-An-Amazing-Feature",
                "4.0.1-dev.yyy-123-an-amazing-feature.12+build.12",
            ),
        ],
    )
    def test_prints_version(self, raw_version: str, branch: str, expected: str) -> None:
        result = invoke("--raw-version", raw_version, "--branch", branch)

        assert result.exit_code == 0
        assert result.output == f"{expected}\n"

    def test_reads_appveyor_environment(self) -> None:
        env = {"APPVEYOR_BUILD_VERSION": "1.4.2.77", "APPVEYOR_REPO_BRANCH": "test"}

        result = invoke(env=env)

        assert result.exit_code == 0
        assert result.output == "1.4.2-test.77+build.77\n"

    def test_options_override_environment(self) -> None:
        env = {"APPVEYOR_BUILD_VERSION": "1.4.2.77", "APPVEYOR_REPO_BRANCH": "test"}

        result = invoke("--branch", "master", env=env)

        assert result.output == "1.4.2+build.77\n"

    def test_no_build_metadata(self) -> None:
        result = invoke("--raw-version", "2.0.0.10", "--branch", "master", "--no-build-metadata")

        assert result.output == "2.0.0\n"

    def test_flag_overrides_config(self, isolated_cwd: Path) -> None:
        (isolated_cwd / "buildkeeper.toml").write_text(
            "[buildkeeper]\ninclude_build_metadata = false\n", encoding="utf-8"
        )

        result = invoke("--raw-version", "2.0.0.10", "--branch", "master", "--build-metadata")

        assert result.output == "2.0.0+build.10\n"

    def test_build_number_override(self) -> None:
        result = invoke("--raw-version", "2.0.0.0", "--branch", "dev", "--build-number", "5")

        assert result.output == "2.0.0-pre.5+build.5\n"

    def test_json_format(self) -> None:
        result = invoke("--raw-version", "3.0.0.11", "--branch", "Dev", "--format", "json")

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "raw_version": "3.0.0.11",
            "branch": "Dev",
            "version": "3.0.0-pre.11+build.11",
            "package_version": "3.0.0-pre.11",
        }

    def test_table_format(self) -> None:
        result = invoke("--raw-version", "3.0.0.11", "--branch", "dev", "-f", "table")

        assert result.exit_code == 0
        assert "Derived Version" in result.output
        assert "3.0.0-pre.11+build.11" in result.output

    def test_missing_version_fails(self) -> None:
        result = invoke("--branch", "master")

        assert result.exit_code == 1
        assert "Build version is required" in result.output

    def test_missing_branch_fails(self) -> None:
        result = invoke("--raw-version", "2.0.0.10")

        assert result.exit_code == 1
        assert "Branch name is required" in result.output

    def test_three_part_version_fails(self) -> None:
        result = invoke("--raw-version", "2.0.0", "--branch", "master")

        assert result.exit_code == 1
        assert "Invalid build version" in result.output


@pytest.mark.unit
class TestVersionPublish:
    """Tests for ``buildkeeper version --publish``."""

    def test_publishes_to_worker_api(self) -> None:
        requests: List[httpx.Request] = []

        with patch(
            "buildkeeper.commands.version.HTTPClient",
            side_effect=lambda: worker_client(204, requests),
        ):
            result = invoke(
                "--raw-version",
                "2.0.0.10",
                "--branch",
                "master",
                "--publish",
                "--api-url",
                "http://localhost:1040/",
            )

        assert result.exit_code == 0
        assert "2.0.0+build.10" in result.output
        assert str(requests[0].url) == "http://localhost:1040/api/build"
        assert json.loads(requests[0].content) == {"version": "2.0.0+build.10"}

    def test_publish_failure_still_succeeds(self) -> None:
        requests: List[httpx.Request] = []

        with patch(
            "buildkeeper.commands.version.HTTPClient",
            side_effect=lambda: worker_client(400, requests),
        ):
            result = invoke(
                "--raw-version",
                "2.0.0.10",
                "--branch",
                "master",
                "--publish",
                env={"APPVEYOR_API_URL": "http://localhost:1040/"},
            )

        assert result.exit_code == 0
        assert "Build version was not published" in result.output

    def test_publish_without_api_url_is_skipped(self) -> None:
        requests: List[httpx.Request] = []

        with patch(
            "buildkeeper.commands.version.HTTPClient",
            side_effect=lambda: worker_client(204, requests),
        ):
            result = invoke("--raw-version", "2.0.0.10", "--branch", "master", "--publish")

        assert result.exit_code == 0
        assert requests == []
        assert "Build version was not published" in result.output

    def test_unusable_api_url_still_succeeds(self) -> None:
        result = invoke(
            "--raw-version",
            "1.0.0.1",
            "--branch",
            "dev",
            "--publish",
            "--api-url",
            "localhost:8080",
        )

        assert result.exit_code == 0
        assert "1.0.0-pre.1+build.1" in result.output
        assert "Build version was not published" in result.output
