"""
Command Dispatcher - runs the external tool once per repository.

For every repository root it receives, the dispatcher:
1. Announces the repository (HUMAN log header on stderr)
2. Spawns [tool, *args] with the repository as working directory,
   inheriting stdin/stdout/stderr and the environment unchanged
3. Waits for the child and records its exit status
4. Records a SpawnError instead if the tool could not be launched

Arguments are forwarded exactly as given; the dispatcher never interprets
them. A failure in one repository never prevents the next one from running.
Children run strictly one at a time, so console output follows walk order.
"""

import signal
import subprocess
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from ..core.shutdown import GracefulShutdown
from ..errors import SpawnError
from ..logging.human import HumanLog

logger = structlog.get_logger()

# Seconds to wait after terminate() before falling back to kill()
TERMINATE_GRACE_SECONDS = 5.0


@dataclass(frozen=True)
class InvocationOutcome:
    """Result of running the tool in one repository.

    Exactly one of exit_status and spawn_error is set.

    Attributes:
        path: Repository root the tool ran in
        exit_status: Child exit status (negative: killed by that signal)
        spawn_error: Set when the child could not be launched
    """

    path: Path
    exit_status: int | None = None
    spawn_error: SpawnError | None = None

    @property
    def succeeded(self) -> bool:
        return self.spawn_error is None and self.exit_status == 0

    @property
    def failure_reason(self) -> str | None:
        """Readable reason for a failure, None when the run succeeded."""
        if self.spawn_error is not None:
            cause = self.spawn_error.cause
            return f"spawn failed: {cause.strerror or cause}"
        if self.exit_status is None or self.exit_status == 0:
            return None
        if self.exit_status < 0:
            return f"terminated by {_signal_name(-self.exit_status)}"
        return f"exited with status {self.exit_status}"


class CommandDispatcher:
    """Runs one tool invocation in each repository, sequentially.

    Args:
        tool: Executable name, looked up on PATH
        args: Arguments forwarded verbatim to the tool
        shutdown: Optional GracefulShutdown consulted between repositories
        display_root: If given, repository headers show paths relative to it
    """

    def __init__(
        self,
        tool: str = "git",
        args: Sequence[str] = (),
        *,
        shutdown: GracefulShutdown | None = None,
        display_root: Path | None = None,
    ) -> None:
        self.tool = tool
        self.args = list(args)
        self.shutdown = shutdown
        self.display_root = display_root
        self.log = logger.bind(component="dispatcher", tool=tool)
        self.hlog = HumanLog(self.log)

    @property
    def stopping(self) -> bool:
        return self.shutdown is not None and self.shutdown.should_stop

    def dispatch(self, paths: Iterable[Path]) -> list[InvocationOutcome]:
        """Run the tool in every path, in order.

        paths is consumed lazily, so a generator from the walker starts
        producing outcomes before the whole tree is scanned.

        Returns:
            One InvocationOutcome per path, in the same order. If the run
            is interrupted, the outcomes collected so far.
        """
        outcomes: list[InvocationOutcome] = []
        for path in paths:
            if self.stopping:
                break
            outcomes.append(self.run_one(Path(path)))

        self.log.info(
            "dispatch.complete",
            repositories=len(outcomes),
            failed=sum(1 for o in outcomes if not o.succeeded),
            interrupted=self.stopping,
        )
        return outcomes

    def run_one(self, path: Path) -> InvocationOutcome:
        """Run the tool in a single repository and wait for it."""
        self.hlog.repo_start(path, display_path=self._display(path))

        command = [self.tool, *self.args]
        self.log.debug("dispatch.spawn", path=str(path), command=command)

        # Our own buffered output must land before the child's
        sys.stdout.flush()
        sys.stderr.flush()

        try:
            proc = subprocess.Popen(command, cwd=path)
        except OSError as e:
            error = SpawnError(path, self.tool, e)
            self.log.debug("dispatch.spawn_failed", path=str(path), error=str(e))
            self.hlog.repo_spawn_failed(path, str(error))
            return InvocationOutcome(path=path, spawn_error=error)

        if self.shutdown is not None:
            self.shutdown.track(proc)
        try:
            status = self._wait(proc)
        finally:
            if self.shutdown is not None:
                self.shutdown.untrack(proc)

        self.log.debug("dispatch.exited", path=str(path), exit_status=status)
        if self.stopping:
            self.hlog.repo_interrupted(path)
        else:
            self.hlog.repo_complete(path, exit_status=status)
        return InvocationOutcome(path=path, exit_status=status)

    def _wait(self, proc: subprocess.Popen) -> int:
        """Wait for the child; on KeyboardInterrupt stop it before re-raising."""
        try:
            return proc.wait()
        except KeyboardInterrupt:
            _terminate(proc)
            raise

    def _display(self, path: Path) -> str:
        if self.display_root is None:
            return str(path)
        try:
            relative = path.relative_to(self.display_root)
        except ValueError:
            return str(path)
        return str(relative) if relative.parts else "."


def dispatch(
    paths: Iterable[Path],
    args: Sequence[str],
    *,
    tool: str = "git",
    shutdown: GracefulShutdown | None = None,
) -> list[InvocationOutcome]:
    """Run ``tool`` with ``args`` in every path and collect the outcomes.

    Convenience wrapper around CommandDispatcher.dispatch().
    """
    return CommandDispatcher(tool=tool, args=args, shutdown=shutdown).dispatch(paths)


def _terminate(proc: subprocess.Popen) -> None:
    if proc.poll() is not None:
        return
    proc.terminate()
    try:
        proc.wait(timeout=TERMINATE_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"
