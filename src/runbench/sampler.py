"""Best-of-N sampling of a benchmark command.

Scheduling noise only ever adds time to a run, so the fastest of
several trials is the best estimate of a command's real cost.
"""

from __future__ import annotations

import logging
from typing import Callable

from runbench.timing import measure

log = logging.getLogger("runbench")

Timer = Callable[..., float]


def best_of(
    command: str,
    runs: int,
    *,
    timeout: float | None = None,
    timer: Timer = measure,
) -> float:
    """Run *command* *runs* times and return the fastest duration.

    Any failing trial aborts the whole sample; its exception propagates
    to the caller.

    Raises:
        ValueError: If *runs* is less than 1.
    """
    if runs < 1:
        raise ValueError(f"runs must be at least 1 (got {runs})")

    log.info('running "%s"...', command)
    fastest = min(timer(command, timeout=timeout) for _ in range(runs))
    log.info('running "%s"... done (%.3fs)', command, fastest)
    return fastest
