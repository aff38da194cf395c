"""
Main CLI for grpr using Click.

Every argument is forwarded verbatim to the underlying tool, including
``--`` and options the tool itself understands. Only two cases are handled
by grpr:
- ``-h`` / ``--help`` as the first argument prints grpr's help
- no arguments at all runs the tool with its default arguments (``status``)

grpr's own behaviour is configured through GRPR_* environment variables.
"""

import sys
import time
from pathlib import Path

import click
import structlog

from . import __version__
from .config.loader import load_config
from .core.shutdown import EXIT_INTERRUPTED, GracefulShutdown
from .discovery import walk
from .errors import DirectoryAccessError, InvalidRootError
from .execution import CommandDispatcher
from .features.report import EXIT_SUCCESS, RunReport, write_report_file
from .logging import HumanLog, configure_logging

logger = structlog.get_logger()

# Exit codes
EXIT_CONFIG_ERROR = 3

HELP_ARGS = ("-h", "--help")

HELP_TEXT = f"""\
grpr {__version__} - run a git command in every repository below the current directory.

Usage:
    grpr [git-command [args...]]

Every argument is passed to git unchanged, once per repository. Directories
holding a .git directory are repositories; grpr does not look inside them
for further repositories. If no git-command is given, 'status' is used.

Options:
    -h, --help   Show this help message (only as the first argument).

Environment:
    GRPR_TOOL          executable to run instead of git
    GRPR_ROOT          directory to start from (default: current directory)
    GRPR_MARKERS       comma-separated marker directory names (default: .git)
    GRPR_VERBOSE       technical log verbosity: 0, 1 or 2
    GRPR_QUIET         1 to hide progress output (the summary is still shown)
    GRPR_LOG_LEVEL     debug, info, human, warn or error
    GRPR_LOG_FILE      write a JSON log to this file
    GRPR_REPORT_FILE   write a JSON run report to this file

Exit status:
    0    every repository succeeded (or none was found)
    1    at least one repository failed
    3    configuration error or invalid starting directory
    130  interrupted

Example:
    grpr pull --rebase
    grpr log -1 --oneline
"""


class PassthroughCommand(click.Command):
    """Click command that hands its raw argument list to the callback.

    Click's own parser would swallow ``--`` and claim ``--help``; grpr has
    to forward both to the tool.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.args = list(args)
        return ctx.args


@click.command(cls=PassthroughCommand, context_settings={"help_option_names": []})
@click.pass_context
def main(ctx: click.Context) -> None:
    """grpr - run a version-control command in every repository below a directory."""
    tool_args = list(ctx.args)
    if tool_args and tool_args[0] in HELP_ARGS:
        click.echo(HELP_TEXT, nl=False)
        sys.exit(EXIT_SUCCESS)

    try:
        config = load_config()
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    configure_logging(config.logging)
    log = logger.bind(component="cli")
    hlog = HumanLog(log)

    args = tool_args or list(config.tool.default_args)
    root = Path(config.discovery.root).resolve()
    report = RunReport(root=root, tool=config.tool.executable, args=args)

    def on_skip(error: DirectoryAccessError) -> None:
        report.record_skip(error)
        log.debug("walk.directory_skipped", path=str(error.path), error=str(error.cause))
        hlog.walk_skipped(
            error.path,
            error.cause.strerror or str(error.cause),
            display_path=report.display_path(error.path),
        )

    log.info("cli.start", root=str(root), tool=config.tool.executable, args=args)

    started = time.monotonic()
    shutdown = GracefulShutdown()
    try:
        repositories = walk(root, markers=config.discovery.markers, on_skip=on_skip)
        dispatcher = CommandDispatcher(
            tool=config.tool.executable,
            args=args,
            shutdown=shutdown,
            display_root=root,
        )
        report.outcomes = dispatcher.dispatch(repositories)
        report.interrupted = shutdown.should_stop
    except InvalidRootError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except KeyboardInterrupt:
        click.echo("\nInterrupted.", err=True)
        sys.exit(EXIT_INTERRUPTED)
    finally:
        shutdown.restore_defaults()
    report.duration_seconds = time.monotonic() - started

    click.echo(report.to_text(), err=True)

    if config.report.file:
        try:
            write_report_file(report, Path(config.report.file))
        except OSError as e:
            click.echo(f"Could not save report: {e}", err=True)

    log.info(
        "cli.complete",
        repositories=len(report.outcomes),
        failed=len(report.failures),
        exit_code=report.exit_code,
    )
    sys.exit(report.exit_code)


if __name__ == "__main__":
    main()
