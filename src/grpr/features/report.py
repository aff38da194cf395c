"""
Run Report - summary of a run across all discovered repositories.

Supports a plain text summary (printed at the end of every run) and JSON
(for CI/CD parsing, written when a report file is configured).
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from ..core.shutdown import EXIT_INTERRUPTED
from ..errors import DirectoryAccessError
from ..execution.dispatcher import InvocationOutcome

logger = structlog.get_logger()

EXIT_SUCCESS = 0
EXIT_FAILED = 1


@dataclass
class RunReport:
    """Complete data of a run.

    Filled in by the CLI while the walk and dispatch proceed, then used to
    print the summary and pick the exit code.
    """

    root: Path
    tool: str
    args: list[str]
    outcomes: list[InvocationOutcome] = field(default_factory=list)
    skipped: list[DirectoryAccessError] = field(default_factory=list)
    interrupted: bool = False
    duration_seconds: float = 0.0

    def record_skip(self, error: DirectoryAccessError) -> None:
        self.skipped.append(error)

    @property
    def failures(self) -> list[InvocationOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def exit_code(self) -> int:
        """0 if every invocation exited 0, 1 on any failure, 130 if interrupted."""
        if self.interrupted:
            return EXIT_INTERRUPTED
        return EXIT_FAILED if self.failures else EXIT_SUCCESS

    def display_path(self, path: Path) -> str:
        """Path relative to the root, or '.' for the root itself."""
        try:
            relative = path.relative_to(self.root)
        except ValueError:
            return str(path)
        return str(relative) if relative.parts else "."

    def to_text(self) -> str:
        """Plain text summary.

        Example:
            3 repositories, 1 failed
              ✗ services/api: exited with status 1
        """
        total = len(self.outcomes)
        failures = self.failures
        noun = "repository" if total == 1 else "repositories"

        if total == 0:
            lines = [f"No repositories found under {self.root}"]
        elif failures:
            lines = [f"{total} {noun}, {len(failures)} failed"]
        else:
            lines = [f"{total} {noun}, all succeeded"]

        for outcome in failures:
            lines.append(f"  ✗ {self.display_path(outcome.path)}: {outcome.failure_reason}")

        if self.skipped:
            lines.append(f"{len(self.skipped)} unreadable director{'y' if len(self.skipped) == 1 else 'ies'} skipped")
            for error in self.skipped:
                lines.append(f"  ⚠ {self.display_path(error.path)}: {error.cause.strerror or error.cause}")

        if self.interrupted:
            lines.append("Interrupted: remaining repositories were not processed")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": str(self.root),
            "tool": self.tool,
            "args": list(self.args),
            "status": _status(self),
            "exit_code": self.exit_code,
            "duration_seconds": round(self.duration_seconds, 3),
            "repositories": [
                {
                    "path": str(o.path),
                    "succeeded": o.succeeded,
                    "exit_status": o.exit_status,
                    "spawn_error": str(o.spawn_error) if o.spawn_error else None,
                    "reason": o.failure_reason,
                }
                for o in self.outcomes
            ],
            "skipped": [
                {"path": str(e.path), "error": str(e.cause)}
                for e in self.skipped
            ],
        }

    def to_json(self) -> str:
        """JSON report (for CI/CD parsing)."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def write_report_file(report: RunReport, target: Path) -> Path:
    """Write the JSON report, creating parent directories if needed.

    Raises:
        OSError: If the file cannot be written
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(report.to_json() + "\n", encoding="utf-8")
    logger.info("report.written", path=str(target))
    return target


def _status(report: RunReport) -> str:
    if report.interrupted:
        return "interrupted"
    return "failed" if report.failures else "success"
