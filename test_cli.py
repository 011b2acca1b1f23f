"""Tests for CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

from playwright.sync_api import Error as PlaywrightError
from typer.testing import CliRunner

from conftest import FakeLauncher
from pagevault.cli import app
from pagevault.core.capture import take_snapshot
from test_index_builder import make_snapshot


runner = CliRunner()

NO_CI = {"GITHUB_OUTPUT": None, "GITHUB_RUN_ID": None}


def _capture_with(launcher):
    def run(url, options):
        options.browser_launcher = launcher
        return take_snapshot(url, options)
    return run


def _snapshot_args(tmp_path: Path, url: str, *extra: str) -> list:
    return [
        "snapshot", url,
        "--archive", str(tmp_path / "archive"),
        "--log-dir", str(tmp_path / "logs"),
        "--network-idle-timeout", "0",
        "--settle", "0",
        *extra,
    ]


class TestSnapshotCommand:
    """Tests for the snapshot command."""

    def test_snapshot_reports_paths(self, tmp_path: Path) -> None:
        launcher = FakeLauncher()
        with patch("pagevault.cli.take_snapshot", side_effect=_capture_with(launcher)):
            result = runner.invoke(
                app, _snapshot_args(tmp_path, "https://example.com/", "--timestamp", "2024-01-01T00-00-00Z"),
                env=NO_CI,
            )

        assert result.exit_code == 0, result.output
        assert "Snapshot saved to:" in result.output
        assert "page.html" in result.output
        assert "page.txt" in result.output
        assert (tmp_path / "archive" / "2024-01-01T00-00-00Z" / "meta.json").is_file()

    def test_snapshot_writes_ci_outputs(self, tmp_path: Path) -> None:
        launcher = FakeLauncher()
        ci_output = tmp_path / "github_output"
        ci_output.write_text("existing=1\n", encoding="utf-8")

        with patch("pagevault.cli.take_snapshot", side_effect=_capture_with(launcher)):
            result = runner.invoke(
                app, _snapshot_args(tmp_path, "https://example.com/", "--timestamp", "2024-01-01T00-00-00Z"),
                env={"GITHUB_OUTPUT": str(ci_output), "GITHUB_RUN_ID": "987"},
            )

        assert result.exit_code == 0, result.output
        assert ci_output.read_text(encoding="utf-8").splitlines() == [
            "existing=1",
            "snapshot_timestamp=2024-01-01T00-00-00Z",
            "snapshot_url=https://example.com/",
        ]
        meta = json.loads((tmp_path / "archive" / "2024-01-01T00-00-00Z" / "meta.json").read_text(encoding="utf-8"))
        assert meta["githubRunId"] == "987"

    def test_snapshot_invalid_url_exits_non_zero(self, tmp_path: Path) -> None:
        result = runner.invoke(app, _snapshot_args(tmp_path, "ftp://example.com"), env=NO_CI)

        assert result.exit_code == 1
        assert "Snapshot error:" in result.output
        assert "http or https" in result.output
        assert not (tmp_path / "archive").exists()
        assert not (tmp_path / "logs").exists()

    def test_snapshot_capture_error_exits_non_zero(self, tmp_path: Path) -> None:
        launcher = FakeLauncher()
        launcher.status = 503
        ci_output = tmp_path / "github_output"

        with patch("pagevault.cli.take_snapshot", side_effect=_capture_with(launcher)):
            result = runner.invoke(
                app, _snapshot_args(tmp_path, "https://example.com/"),
                env={"GITHUB_OUTPUT": str(ci_output), "GITHUB_RUN_ID": None},
            )

        assert result.exit_code == 1
        assert "HTTP status 503" in result.output
        assert not ci_output.exists()

    def test_snapshot_requires_url(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["snapshot"], env=NO_CI)
        assert result.exit_code != 0

    def test_snapshot_capture_error_is_logged(self, tmp_path: Path) -> None:
        launcher = FakeLauncher()
        launcher.navigation_error = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        with patch("pagevault.cli.take_snapshot", side_effect=_capture_with(launcher)):
            result = runner.invoke(app, _snapshot_args(tmp_path, "https://example.invalid/"), env=NO_CI)

        assert result.exit_code == 1
        assert "Snapshot error: Navigation failed" in result.output
        assert (tmp_path / "logs" / "pagevault.log").is_file()
        assert "ERR_" in (tmp_path / "logs" / "pagevault_errors.log").read_text(encoding="utf-8")


class TestBuildIndexCommand:
    """Tests for the build-index command."""

    def _args(self, tmp_path: Path) -> list:
        return [
            "build-index",
            "--archive", str(tmp_path / "archive"),
            "--docs", str(tmp_path / "docs"),
            "--log-dir", str(tmp_path / "logs"),
        ]

    def test_build_index_empty_archive(self, tmp_path: Path) -> None:
        result = runner.invoke(app, self._args(tmp_path), env=NO_CI)

        assert result.exit_code == 0, result.output
        assert "No snapshots yet." in result.output
        assert (tmp_path / "docs" / "latest" / "index.json").read_text(encoding="utf-8") == "[]\n"

    def test_build_index_lists_entries(self, tmp_path: Path) -> None:
        make_snapshot(tmp_path / "archive", "2024-01-01T00-00-00Z", "https://example.com/")
        (tmp_path / "archive" / "broken").mkdir()

        result = runner.invoke(app, self._args(tmp_path), env=NO_CI)

        assert result.exit_code == 0, result.output
        assert "example-com" in result.output
        assert "Entries: 1, skipped: 1" in result.output
        assert (tmp_path / "docs" / "index.html").is_file()

    def test_build_index_unwritable_output_exits_non_zero(self, tmp_path: Path) -> None:
        (tmp_path / "docs").write_text("not a directory", encoding="utf-8")

        result = runner.invoke(app, self._args(tmp_path), env=NO_CI)

        assert result.exit_code == 1
        assert "Failed to build docs index:" in result.output
