"""Per-row rewriting of the results matrix.

Every row uses its own first column as the baseline.  Missing cells
count as ``0``; a ratio whose divisor is ``0`` is written as ``0`` and
logged, so the data file never carries ``inf`` or ``nan``.
"""

from __future__ import annotations

import logging

from runbench.config import Mode
from runbench.matrix import ResultsMatrix

log = logging.getLogger("runbench")


def transform_value(value: float | None, base: float | None, mode: Mode) -> float:
    """Rewrite one cell against its row baseline."""
    v = value if value is not None else 0.0
    b = base if base is not None else 0.0
    if mode is Mode.RAW:
        return v
    if mode is Mode.SPEEDUP:
        return b / v if v else 0.0
    return v / b if b else 0.0


def transform_matrix(matrix: ResultsMatrix, mode: Mode) -> ResultsMatrix:
    """Rewrite every cell of *matrix* in place and return it.

    After this call no cell is missing; the positions that were missing
    are kept in ``matrix.unmeasured``.
    """
    for i, (test, row) in enumerate(matrix.rows()):
        if not row:
            continue
        base = row[0]
        for j, value in enumerate(row):
            divisor = value if mode is Mode.SPEEDUP else base
            if mode is not Mode.RAW and not divisor and value is not None:
                log.warning(
                    "%s/%s: %s against a zero or missing value, writing 0",
                    test.name,
                    matrix.binaries[j].name,
                    mode.value,
                )
            if value is None:
                matrix.unmeasured.add((i, j))
            row[j] = transform_value(value, base, mode)
    return matrix
