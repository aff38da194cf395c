"""
Human Log -- formatter and helper for run progress output.

Produces short readable lines on stderr, so the tool's own output on
stdout stays grouped under the repository it belongs to.

Example output:
    ── repos/api ──
    (git output)
    ── repos/web ──
    (git output)
      ✗ exited with status 1
    ⚠  skipped repos/private: Permission denied
"""

import logging
import sys

from .levels import HUMAN


class HumanFormatter:
    """Formats progress events into readable text.

    Each event type has its own format. Events without one are dropped.
    """

    def format_event(self, event: str, **kw) -> str | None:
        """Format an event as readable text.

        Args:
            event: Event name (e.g. "repo.start")
            **kw: Event parameters

        Returns:
            Formatted text, or None if the event has no human format
        """
        match event:

            case "repo.start":
                path = kw.get("display_path") or kw.get("path", "?")
                return f"── {path} ──"

            case "repo.complete":
                status = kw.get("exit_status")
                if status == 0:
                    return None
                return f"  ✗ exited with status {status}"

            case "repo.spawn_failed":
                error = kw.get("error", "?")
                return f"  ✗ {error}"

            case "repo.interrupted":
                return "  ⚠  interrupted"

            case "walk.skipped":
                path = kw.get("display_path") or kw.get("path", "?")
                error = kw.get("error", "?")
                return f"⚠  skipped {path}: {error}"

            case _:
                return None


class HumanLogHandler(logging.Handler):
    """Logging handler that formats HUMAN events.

    Only handles records at exactly the HUMAN level (25) and ignores the
    rest. Writes to stderr so stdout pipes are left to the tool.
    """

    def __init__(self, stream=None) -> None:
        super().__init__(level=HUMAN)
        self.stream = stream or sys.stderr
        self.formatter_inst = HumanFormatter()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.levelno != HUMAN:
                return

            # structlog hands the event dict over as record.msg when the
            # chain ends in ProcessorFormatter.wrap_for_formatter
            if isinstance(record.msg, dict):
                kw = dict(record.msg)
                event = kw.pop("event", None)
            else:
                kw = {}
                event = record.getMessage()

            if not event:
                return

            formatted = self.formatter_inst.format_event(str(event), **kw)
            if formatted is not None:
                self.stream.write(formatted + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


class HumanLog:
    """Typed helper to emit HUMAN-level events.

    Instead of calling log.log(HUMAN, "event", ...) directly, use methods
    with clear semantic names.

    Usage:
        hlog = HumanLog(structlog.get_logger())
        hlog.repo_start(Path("repos/api"))
        hlog.repo_complete(Path("repos/api"), exit_status=0)
    """

    def __init__(self, logger) -> None:
        self._log = logger

    def repo_start(self, path, display_path: str | None = None) -> None:
        self._log.log(HUMAN, "repo.start", path=str(path), display_path=display_path)

    def repo_complete(self, path, exit_status: int) -> None:
        self._log.log(HUMAN, "repo.complete", path=str(path), exit_status=exit_status)

    def repo_spawn_failed(self, path, error: str) -> None:
        self._log.log(HUMAN, "repo.spawn_failed", path=str(path), error=error)

    def repo_interrupted(self, path) -> None:
        self._log.log(HUMAN, "repo.interrupted", path=str(path))

    def walk_skipped(self, path, error: str, display_path: str | None = None) -> None:
        self._log.log(HUMAN, "walk.skipped", path=str(path), error=error, display_path=display_path)
