"""Tests for runbench.transform — raw, speedup and normalize."""

from __future__ import annotations

import math
import unittest

from runbench.config import BinaryDef, Mode, TestDef
from runbench.matrix import ResultsMatrix
from runbench.transform import transform_matrix, transform_value


def _matrix(rows: list[list[float | None]]) -> ResultsMatrix:
    n_cols = len(rows[0]) if rows else 0
    m = ResultsMatrix(
        tests=tuple(TestDef(f"t{i}", "x") for i in range(len(rows))),
        binaries=tuple(BinaryDef(f"b{j}", "x") for j in range(n_cols)),
    )
    for i, row in enumerate(rows):
        for j, v in enumerate(row):
            m.set(i, j, v)
    return m


class TestTransformValue(unittest.TestCase):
    def test_raw(self) -> None:
        self.assertEqual(transform_value(1.5, 3.0, Mode.RAW), 1.5)

    def test_speedup(self) -> None:
        self.assertEqual(transform_value(1.0, 2.0, Mode.SPEEDUP), 2.0)

    def test_normalize(self) -> None:
        self.assertEqual(transform_value(1.0, 2.0, Mode.NORMALIZE), 0.5)

    def test_missing_is_zero_in_every_mode(self) -> None:
        for mode in Mode:
            with self.subTest(mode=mode):
                self.assertEqual(transform_value(None, 2.0, mode), 0.0)

    def test_zero_divisor_yields_zero(self) -> None:
        self.assertEqual(transform_value(0.0, 2.0, Mode.SPEEDUP), 0.0)
        self.assertEqual(transform_value(1.0, None, Mode.NORMALIZE), 0.0)
        self.assertEqual(transform_value(1.0, 0.0, Mode.NORMALIZE), 0.0)


class TestTransformMatrix(unittest.TestCase):
    def test_raw_is_identity(self) -> None:
        rows = [[2.0, 1.0, 0.5], [0.25, 3.0, 7.125]]
        m = _matrix([list(r) for r in rows])
        transform_matrix(m, Mode.RAW)
        self.assertEqual(m.cells, rows)

    def test_in_place_and_returns_same_object(self) -> None:
        m = _matrix([[2.0, 1.0]])
        cells = m.cells
        self.assertIs(transform_matrix(m, Mode.SPEEDUP), m)
        self.assertIs(m.cells, cells)

    def test_speedup(self) -> None:
        m = transform_matrix(_matrix([[2.0, 1.0, 4.0]]), Mode.SPEEDUP)
        self.assertEqual(m.cells, [[1.0, 2.0, 0.5]])

    def test_normalize_constant_row(self) -> None:
        m = transform_matrix(_matrix([[3.0, 3.0, 3.0]]), Mode.NORMALIZE)
        self.assertEqual(m.cells, [[1.0, 1.0, 1.0]])

    def test_baseline_is_per_row(self) -> None:
        m = transform_matrix(_matrix([[2.0, 1.0], [10.0, 5.0]]), Mode.NORMALIZE)
        self.assertEqual(m.cells, [[1.0, 0.5], [1.0, 0.5]])

    def test_missing_cells_become_zero(self) -> None:
        for mode in Mode:
            with self.subTest(mode=mode):
                m = transform_matrix(_matrix([[2.0, None]]), mode)
                self.assertEqual(m.cells[0][1], 0.0)
                self.assertEqual(m.missing_count, 0)
                self.assertEqual(m.unmeasured, {(0, 1)})

    def test_measured_zero_is_not_unmeasured(self) -> None:
        m = transform_matrix(_matrix([[0.0, 1.0]]), Mode.RAW)
        self.assertEqual(m.unmeasured, set())

    def test_missing_baseline_zeroes_row_with_warning(self) -> None:
        with self.assertLogs("runbench", level="WARNING") as cm:
            m = transform_matrix(_matrix([[None, 1.5, 2.0]]), Mode.NORMALIZE)
        self.assertEqual(m.cells, [[0.0, 0.0, 0.0]])
        self.assertEqual(len(cm.output), 2)
        self.assertIn("t0/b1", cm.output[0])

    def test_missing_baseline_speedup(self) -> None:
        m = transform_matrix(_matrix([[None, 2.0]]), Mode.SPEEDUP)
        self.assertEqual(m.cells, [[0.0, 0.0]])

    def test_never_produces_inf_or_nan(self) -> None:
        m = transform_matrix(_matrix([[0.0, 0.0], [None, None]]), Mode.SPEEDUP)
        for row in m.cells:
            for v in row:
                self.assertTrue(math.isfinite(v))

    def test_empty_matrix(self) -> None:
        m = ResultsMatrix(tests=(), binaries=())
        self.assertEqual(transform_matrix(m, Mode.SPEEDUP).cells, [])


if __name__ == "__main__":
    unittest.main()
