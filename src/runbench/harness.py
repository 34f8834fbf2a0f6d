"""Benchmark run orchestration.

Steps:
1. Validate the configuration against the suite.
2. Run the suite's setup command.
3. Measure every (test, binary) pair into a results matrix.
4. Run the suite's teardown command (also after an interrupt).
5. Transform the matrix (raw, speedup or normalize).
6. Write the data file and, optionally, render the plot.
"""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

from runbench.config import HarnessConfig, Suite, validate_config
from runbench.formatting import format_duration
from runbench.matrix import CellFailure, ResultsMatrix, Sampler, build_matrix
from runbench.report import render_plot, write_data_file
from runbench.sampler import best_of
from runbench.transform import transform_matrix

log = logging.getLogger("runbench")


@dataclass
class HarnessResult:
    """Outcome of a complete benchmark run."""

    matrix: ResultsMatrix
    data_path: Path
    image_path: Path | None  # None when plotting is disabled

    @property
    def failures(self) -> list[CellFailure]:
        return self.matrix.failures

    @property
    def interrupted(self) -> bool:
        return self.matrix.interrupted


def run_hook(name: str, command: str | None) -> None:
    """Run a suite setup/teardown shell command, failing loudly."""
    if not command:
        return
    log.info("Running %s: %s", name, command)
    subprocess.run(command, shell=True, check=True)


def run_harness(
    config: HarnessConfig,
    suite: Suite,
    *,
    sampler: Sampler = best_of,
) -> HarnessResult:
    """Execute a full benchmark run.

    Raises:
        ValueError: If the configuration is invalid.
        subprocess.CalledProcessError: If the setup command fails.
    """
    errors = validate_config(config, suite)
    fatal = [e for e in errors if e.severity == "error"]
    for w in (e for e in errors if e.severity == "warning"):
        log.warning("Config warning: %s: %s", w.field, w.message)
    if fatal:
        messages = [f"  {e.field}: {e.message}" for e in fatal]
        raise ValueError("Invalid benchmark configuration:\n" + "\n".join(messages))

    log.info(
        "Benchmarking %d test(s) x %d binary(ies), best of %d",
        len(suite.tests),
        len(suite.binaries),
        config.runs,
    )

    start = time.monotonic()
    run_hook("setup", suite.setup)
    try:
        matrix = build_matrix(suite, config, sampler=sampler)
    finally:
        run_hook("teardown", suite.teardown)

    if matrix.failures:
        log.info("%d cell(s) failed and will be reported as 0", len(matrix.failures))

    transform_matrix(matrix, config.mode)

    data_path = write_data_file(matrix, config.basename)
    log.info("Data written to %s", data_path)

    image_path: Path | None = None
    if config.plot:
        image_path = config.image_path
        render_plot(data_path, image_path, len(suite.binaries), script=config.plot_script)

    log.info("final done (%s)", format_duration(time.monotonic() - start))
    return HarnessResult(matrix=matrix, data_path=data_path, image_path=image_path)
