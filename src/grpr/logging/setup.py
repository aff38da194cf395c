"""
Complete configuration of the structured logging system.

Three independent pipelines:
1. File (JSON) -- if config.file is set. Captures everything (DEBUG+).
2. Human handler (stderr) -- HUMAN events only: which repository is running.
3. Technical console (stderr) -- WARNING by default, INFO with verbose=1,
   DEBUG with verbose>=2. Excludes HUMAN.

config.quiet silences pipelines 2 and 3. The final run summary is printed
by the CLI and is not affected.
"""

import logging
import sys
from pathlib import Path

import structlog

from ..config.schema import LoggingConfig
from .human import HumanLogHandler
from .levels import HUMAN

_LEVEL_NAMES = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "human": HUMAN,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(config: LoggingConfig, stream=None) -> None:
    """Configure the full logging system.

    Args:
        config: Logging configuration (level, file, verbose, quiet)
        stream: Stream for the console pipelines (defaults to sys.stderr)
    """
    stream = stream or sys.stderr

    for handler in logging.root.handlers:
        handler.close()
    logging.root.handlers.clear()
    structlog.reset_defaults()

    # Root logger captures everything; handlers filter by level
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[],
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    # ── Pipeline 1: JSON file ─────────────────────────────────────────────
    if config.file:
        file_path = Path(config.file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(str(file_path), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    structlog.processors.JSONRenderer(),
                ],
                foreign_pre_chain=shared_processors,
            )
        )
        logging.root.addHandler(file_handler)

    if not config.quiet:
        # ── Pipeline 2: Human handler ─────────────────────────────────────
        if _LEVEL_NAMES[config.level] <= HUMAN:
            human_handler = HumanLogHandler(stream=stream)
            human_handler.setLevel(HUMAN)
            human_handler.addFilter(lambda record: record.levelno == HUMAN)
            logging.root.addHandler(human_handler)

        # ── Pipeline 3: Technical console ─────────────────────────────────
        console_handler = logging.StreamHandler(stream)
        console_handler.setLevel(_console_level(config))
        console_handler.addFilter(lambda record: record.levelno != HUMAN)
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.dev.ConsoleRenderer(colors=_isatty(stream)),
                ],
                foreign_pre_chain=shared_processors,
            )
        )
        logging.root.addHandler(console_handler)

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _console_level(config: LoggingConfig) -> int:
    """Level for the technical console handler.

    verbose 0  -> WARNING (problems only; progress goes to the human handler)
    verbose 1  -> INFO
    verbose 2+ -> DEBUG

    An explicit level stricter than the verbose one wins, so
    level="error" hides warnings even with verbose=1.
    """
    levels = {
        0: logging.WARNING,
        1: logging.INFO,
    }
    verbose_level = levels.get(config.verbose, logging.DEBUG)
    configured = _LEVEL_NAMES[config.level]
    if configured > HUMAN:
        return max(verbose_level, configured)
    return verbose_level


def _isatty(stream) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)
    """
    return structlog.get_logger(name)
