"""
Tests for the run report.

Covers:
- Exit code selection (success, failure, interrupted)
- Text summary (failing repositories, skipped directories)
- JSON report and report file writing
"""

import json
from pathlib import Path

import pytest

from grpr.errors import DirectoryAccessError, SpawnError
from grpr.execution.dispatcher import InvocationOutcome
from grpr.features.report import EXIT_FAILED, EXIT_SUCCESS, RunReport, write_report_file
from grpr.core.shutdown import EXIT_INTERRUPTED


# -- Fixtures ----------------------------------------------------------------


@pytest.fixture
def root(tmp_path: Path) -> Path:
    return tmp_path / "work"


def ok(path: Path) -> InvocationOutcome:
    return InvocationOutcome(path=path, exit_status=0)


def spawn_failure(path: Path) -> InvocationOutcome:
    cause = FileNotFoundError(2, "No such file or directory", "git")
    return InvocationOutcome(path=path, spawn_error=SpawnError(path, "git", cause))


# -- Tests: exit codes -------------------------------------------------------


class TestExitCode:
    def test_empty_run_succeeds(self, root: Path):
        report = RunReport(root=root, tool="git", args=["status"])
        assert report.exit_code == EXIT_SUCCESS

    def test_all_succeeded(self, root: Path):
        report = RunReport(root=root, tool="git", args=["status"], outcomes=[ok(root / "a"), ok(root / "b")])
        assert report.exit_code == EXIT_SUCCESS
        assert report.failures == []

    def test_non_zero_exit_fails(self, root: Path):
        bad = InvocationOutcome(path=root / "b", exit_status=1)
        report = RunReport(root=root, tool="git", args=["status"], outcomes=[ok(root / "a"), bad])
        assert report.exit_code == EXIT_FAILED
        assert report.failures == [bad]

    def test_spawn_failure_fails(self, root: Path):
        report = RunReport(root=root, tool="git", args=["status"], outcomes=[spawn_failure(root / "a")])
        assert report.exit_code == EXIT_FAILED

    def test_interrupted_wins(self, root: Path):
        report = RunReport(root=root, tool="git", args=["status"], outcomes=[ok(root / "a")], interrupted=True)
        assert report.exit_code == EXIT_INTERRUPTED

    def test_skipped_directories_do_not_fail_the_run(self, root: Path):
        report = RunReport(root=root, tool="git", args=["status"], outcomes=[ok(root / "a")])
        report.record_skip(DirectoryAccessError(root / "locked", PermissionError(13, "Permission denied")))
        assert report.exit_code == EXIT_SUCCESS


# -- Tests: text summary -----------------------------------------------------


class TestToText:
    def test_no_repositories(self, root: Path):
        text = RunReport(root=root, tool="git", args=["status"]).to_text()
        assert text == f"No repositories found under {root}"

    def test_all_succeeded(self, root: Path):
        report = RunReport(root=root, tool="git", args=["status"], outcomes=[ok(root / "a"), ok(root / "b")])
        assert report.to_text() == "2 repositories, all succeeded"

    def test_singular(self, root: Path):
        report = RunReport(root=root, tool="git", args=["status"], outcomes=[ok(root)])
        assert report.to_text() == "1 repository, all succeeded"

    def test_names_exactly_the_failing_repository(self, root: Path):
        outcomes = [
            ok(root / "a"),
            InvocationOutcome(path=root / "b" / "c", exit_status=1),
            ok(root / "d"),
        ]
        text = RunReport(root=root, tool="git", args=["pull"], outcomes=outcomes).to_text()

        lines = text.splitlines()
        assert lines[0] == "3 repositories, 1 failed"
        assert lines[1] == f"  ✗ {Path('b') / 'c'}: exited with status 1"
        assert len(lines) == 2

    def test_distinguishes_spawn_failure(self, root: Path):
        outcomes = [spawn_failure(root / "a"), InvocationOutcome(path=root / "b", exit_status=2)]
        text = RunReport(root=root, tool="git", args=["status"], outcomes=outcomes).to_text()

        assert "a: spawn failed: No such file or directory" in text
        assert "b: exited with status 2" in text

    def test_lists_skipped_directories(self, root: Path):
        report = RunReport(root=root, tool="git", args=["status"], outcomes=[ok(root / "a")])
        report.record_skip(DirectoryAccessError(root / "locked", PermissionError(13, "Permission denied")))

        text = report.to_text()

        assert "1 unreadable directory skipped" in text
        assert "locked: Permission denied" in text

    def test_interrupted_note(self, root: Path):
        report = RunReport(root=root, tool="git", args=["status"], outcomes=[ok(root / "a")], interrupted=True)
        assert report.to_text().endswith("Interrupted: remaining repositories were not processed")

    def test_root_itself_displayed_as_dot(self, root: Path):
        report = RunReport(root=root, tool="git", args=["status"])
        assert report.display_path(root) == "."


# -- Tests: JSON -------------------------------------------------------------


class TestJson:
    def test_structure(self, root: Path):
        outcomes = [ok(root / "a"), spawn_failure(root / "b")]
        report = RunReport(root=root, tool="git", args=["fetch", "--all"], outcomes=outcomes)

        data = json.loads(report.to_json())

        assert data["root"] == str(root)
        assert data["tool"] == "git"
        assert data["args"] == ["fetch", "--all"]
        assert data["status"] == "failed"
        assert data["exit_code"] == EXIT_FAILED
        assert [r["path"] for r in data["repositories"]] == [str(root / "a"), str(root / "b")]
        assert data["repositories"][0]["succeeded"] is True
        assert data["repositories"][1]["exit_status"] is None
        assert "No such file or directory" in data["repositories"][1]["spawn_error"]
        assert data["skipped"] == []

    def test_write_report_file_creates_parents(self, root: Path, tmp_path: Path):
        report = RunReport(root=root, tool="git", args=["status"], outcomes=[ok(root / "a")])
        target = tmp_path / "reports" / "nested" / "run.json"

        written = write_report_file(report, target)

        assert written == target
        assert json.loads(target.read_text(encoding="utf-8"))["status"] == "success"
