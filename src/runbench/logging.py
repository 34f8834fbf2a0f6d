"""Logging setup for runbench.

Progress ("running ... done") goes to stderr as plain lines so it reads
like the harness's own output; only warnings and errors carry a level
prefix.  ``--log-file`` adds a timestamped DEBUG log that also records
every wrapped shell command.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "runbench"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"


class ConsoleFormatter(logging.Formatter):
    """Bare messages below WARNING, ``LEVEL: message`` from WARNING up."""

    def __init__(self) -> None:
        super().__init__("%(message)s")
        self._prefixed = logging.Formatter("%(levelname)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return self._prefixed.format(record)
        return super().format(record)


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure and return the ``runbench`` logger.

    Args:
        verbose: Show DEBUG on the console, including each shell command.
        quiet: Hide progress; only warnings and errors. Ignored if *verbose*.
        log_file: Also log everything at DEBUG to this path.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Remove any existing handlers to allow reconfiguration.
    logger.handlers.clear()

    console = logging.StreamHandler()
    if verbose:
        console.setLevel(logging.DEBUG)
    elif quiet:
        console.setLevel(logging.WARNING)
    else:
        console.setLevel(logging.INFO)
    console.setFormatter(ConsoleFormatter())
    logger.addHandler(console)

    if log_file is not None:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(fh)

    return logger
