"""
GracefulShutdown - SIGINT and SIGTERM handling for a clean stop.

Manages interruption of a run:
- First SIGINT (Ctrl+C) or SIGTERM: warn the operator, mark the flag and
  terminate the child process currently running, if any. No further
  repository is started.
- Second SIGINT: immediate exit with code 130, killing the child first.

The dispatcher checks should_stop between repositories and registers each
child with track() while it runs, so an interrupt never leaves orphans.
"""

import signal
import subprocess
import sys

import structlog

logger = structlog.get_logger()

EXIT_INTERRUPTED = 130  # POSIX convention: 128 + SIGINT(2)


class GracefulShutdown:
    """Handles shutdown signals for a clean stop of the run.

    Install once at the start of the command and hand it to the
    CommandDispatcher.

    Attributes:
        should_stop: True once an interrupt signal has been received.

    Usage:
        shutdown = GracefulShutdown()
        try:
            outcomes = dispatch(walk(root), args, shutdown=shutdown)
        finally:
            shutdown.restore_defaults()
    """

    def __init__(self) -> None:
        """Install the signal handlers."""
        self._interrupted = False
        self._child: subprocess.Popen | None = None

        signal.signal(signal.SIGINT, self._handler)
        signal.signal(signal.SIGTERM, self._handler)

        logger.debug("graceful_shutdown.installed")

    def _handler(self, signum: int, frame) -> None:
        """Shared handler for SIGINT and SIGTERM.

        First signal: warn, mark the flag, terminate the running child.
        Second signal: immediate exit.
        """
        signal_name = "SIGINT" if signum == signal.SIGINT else "SIGTERM"

        if self._interrupted:
            logger.warning("graceful_shutdown.forced", signal=signal_name)
            self._kill_child()
            sys.exit(EXIT_INTERRUPTED)

        self._interrupted = True
        logger.warning("graceful_shutdown.requested", signal=signal_name)

        sys.stderr.write(
            f"\n⚠️  {signal_name} received. Stopping after the current repository...\n"
            "   (Ctrl+C again to exit immediately)\n"
        )
        sys.stderr.flush()

        self._terminate_child()

    def track(self, proc: subprocess.Popen) -> None:
        """Register the child process that is currently running."""
        self._child = proc

    def untrack(self, proc: subprocess.Popen) -> None:
        """Forget a child process once it has been waited for."""
        if self._child is proc:
            self._child = None

    def _terminate_child(self) -> None:
        child = self._child
        if child is not None and child.poll() is None:
            logger.debug("graceful_shutdown.terminate_child", pid=child.pid)
            child.terminate()

    def _kill_child(self) -> None:
        child = self._child
        if child is not None and child.poll() is None:
            logger.debug("graceful_shutdown.kill_child", pid=child.pid)
            child.kill()

    @property
    def should_stop(self) -> bool:
        """True if an interrupt signal has been received."""
        return self._interrupted

    def reset(self) -> None:
        """Reset the flag (useful for testing)."""
        self._interrupted = False

    def restore_defaults(self) -> None:
        """Restore the default signal handlers."""
        signal.signal(signal.SIGINT, signal.default_int_handler)
        signal.signal(signal.SIGTERM, signal.SIG_DFL)
        logger.debug("graceful_shutdown.restored_defaults")
