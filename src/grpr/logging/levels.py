"""
HUMAN logging level -- readable run progress.

Custom level between INFO (20) and WARNING (30). It does not indicate
severity: it marks the events an operator follows during a run (which
repository is being processed, how it ended) without technical noise.

Hierarchy:
    debug  (10) -> directory listings, spawn arguments
    info   (20) -> configuration, walk start/end
    human  (25) -> * repository started, finished, skipped
    warn   (30) -> non-fatal problems (unreadable directories)
    error  (40) -> errors
"""

import logging

import structlog

# Custom level: between INFO (20) and WARNING (30)
HUMAN = 25
logging.addLevelName(HUMAN, "HUMAN")


# Inject the .human() method into Python's Logger class so structlog can
# proxy method_name="human" to the stdlib logger
def _human_method(self, message, *args, **kwargs):
    if self.isEnabledFor(HUMAN):
        self._log(HUMAN, message, args, **kwargs)


logging.Logger.human = _human_method

# Register the level in structlog so BoundLogger.log(HUMAN, ...) resolves it
structlog.stdlib.LEVEL_TO_NAME[HUMAN] = "human"
