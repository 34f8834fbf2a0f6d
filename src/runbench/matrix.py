"""The results matrix and the loop that fills it.

Rows are tests and columns are binaries, both in declaration order.
A cell holds the best-of-N duration in seconds, or ``None`` when the
measurement failed.  ``None`` is never confused with ``0.0``.

Each cell is measured independently: a failing (test, binary) pair is
recorded as a :class:`CellFailure` and the loop moves on.  The builder
is the failure boundary; no measurement error escapes it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Union

from runbench.config import BinaryDef, HarnessConfig, Suite, TestDef
from runbench.sampler import best_of

log = logging.getLogger("runbench")

Sampler = Callable[..., float]


# ---------------------------------------------------------------------------
# Per-cell results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Measured:
    """A successful cell: the fastest observed duration."""

    seconds: float


@dataclass(frozen=True)
class CellFailure:
    """A cell whose measurement failed."""

    test: str
    binary: str
    command: str
    reason: str  # Exception class name, e.g. "ParseError"
    detail: str  # Full diagnostic text

    def format(self) -> str:
        """Operator-facing report of the failure."""
        return f"error:\n{self.detail}\n---"


CellResult = Union[Measured, CellFailure]


# ---------------------------------------------------------------------------
# ResultsMatrix
# ---------------------------------------------------------------------------


@dataclass
class ResultsMatrix:
    """A fixed-size tests × binaries grid of optional durations."""

    tests: tuple[TestDef, ...]
    binaries: tuple[BinaryDef, ...]
    cells: list[list[float | None]] = field(init=False)
    failures: list[CellFailure] = field(default_factory=list)
    interrupted: bool = False
    # (row, col) of cells that were missing when transform_matrix filled them
    unmeasured: set[tuple[int, int]] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.cells = [[None] * len(self.binaries) for _ in self.tests]

    @property
    def shape(self) -> tuple[int, int]:
        """(number of tests, number of binaries)."""
        return len(self.tests), len(self.binaries)

    def get(self, row: int, col: int) -> float | None:
        self._check_index(row, col)
        return self.cells[row][col]

    def set(self, row: int, col: int, value: float | None) -> None:
        self._check_index(row, col)
        self.cells[row][col] = value

    def is_missing(self, row: int, col: int) -> bool:
        return self.get(row, col) is None

    @property
    def missing_count(self) -> int:
        return sum(1 for row in self.cells for v in row if v is None)

    def rows(self) -> list[tuple[TestDef, list[float | None]]]:
        """Pairs of (test, row values) in declaration order."""
        return list(zip(self.tests, self.cells))

    def _check_index(self, row: int, col: int) -> None:
        n_rows, n_cols = self.shape
        if not (0 <= row < n_rows and 0 <= col < n_cols):
            raise IndexError(f"cell ({row}, {col}) outside {n_rows}x{n_cols} matrix")


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def measure_cell(
    suite: Suite,
    test: TestDef,
    binary: BinaryDef,
    config: HarnessConfig,
    *,
    sampler: Sampler = best_of,
) -> CellResult:
    """Sample one (test, binary) pair, returning a failure instead of raising."""
    command = suite.command_for(test, binary)
    try:
        seconds = sampler(command, config.runs, timeout=config.timeout)
    except Exception as exc:  # noqa: BLE001
        return CellFailure(
            test=test.name,
            binary=binary.name,
            command=command,
            reason=type(exc).__name__,
            detail=str(exc),
        )
    return Measured(seconds)


def build_matrix(
    suite: Suite,
    config: HarnessConfig,
    *,
    sampler: Sampler = best_of,
) -> ResultsMatrix:
    """Measure every (test, binary) pair of *suite*, tests outermost.

    Failed cells stay ``None`` and are collected on
    ``matrix.failures``.  With ``config.suppress_errors`` off, each
    failure is reported as a warning; otherwise it only goes to the
    debug log.  A ``KeyboardInterrupt`` stops the loop early and leaves
    the remaining cells missing.
    """
    matrix = ResultsMatrix(tests=suite.tests, binaries=suite.binaries)

    try:
        for i, test in enumerate(suite.tests):
            for j, binary in enumerate(suite.binaries):
                result = measure_cell(suite, test, binary, config, sampler=sampler)
                if isinstance(result, Measured):
                    matrix.set(i, j, result.seconds)
                    continue
                matrix.failures.append(result)
                if config.suppress_errors:
                    log.debug("%s/%s failed: %s", test.name, binary.name, result.detail)
                else:
                    log.warning("%s", result.format())
    except KeyboardInterrupt:
        matrix.interrupted = True
        log.warning(
            "Measurement interrupted; %d cell(s) left unmeasured.",
            matrix.missing_count - len(matrix.failures),
        )

    return matrix
