"""Terminal display of a finished benchmark run."""

from __future__ import annotations

from runbench.config import Mode, Suite
from runbench.formatting import format_section_header, format_table, truncate
from runbench.matrix import CellFailure, ResultsMatrix

_UNITS = {
    Mode.RAW: "seconds, best of {runs}",
    Mode.SPEEDUP: "speedup vs {baseline}, best of {runs}",
    Mode.NORMALIZE: "time relative to {baseline}, best of {runs}",
}

# Test labels are free text; keep the table readable.
MAX_LABEL_WIDTH = 30
MAX_COMMAND_WIDTH = 60


def format_cell(value: float | None, mode: Mode) -> str:
    if value is None:
        return "-"
    if mode is Mode.RAW:
        return f"{value:.3f}"
    return f"{value:.2f}x"


def format_results(matrix: ResultsMatrix, mode: Mode, runs: int) -> str:
    """Format the matrix as an aligned table with a header line.

    Cells that were never measured (failed or interrupted) show as
    ``-`` even after the transform has written them as 0.
    """
    baseline = matrix.binaries[0].name if matrix.binaries else "?"
    title = "Results (" + _UNITS[mode].format(runs=runs, baseline=baseline) + ")"

    headers = ["test"] + [b.name for b in matrix.binaries]
    rows = []
    for i, (test, values) in enumerate(matrix.rows()):
        cells = [
            format_cell(None if (i, j) in matrix.unmeasured else v, mode)
            for j, v in enumerate(values)
        ]
        rows.append([test.name] + cells)
    alignments = ["l"] + ["r"] * len(matrix.binaries)

    lines = [
        format_section_header(title),
        format_table(headers, rows, alignments=alignments, max_col_width={0: MAX_LABEL_WIDTH}),
    ]
    if matrix.failures:
        lines.append("")
        lines.append(format_failures(matrix.failures))
    if matrix.interrupted:
        lines.append("")
        lines.append("  (interrupted: unmeasured cells are written as 0)")
    return "\n".join(lines)


def format_failures(failures: list[CellFailure]) -> str:
    """One line per failed cell."""
    lines = [f"Failed cells ({len(failures)}):"]
    for f in failures:
        lines.append(f"  {truncate(f.test, MAX_LABEL_WIDTH):20s} {f.binary:15s} {f.reason}")
    return "\n".join(lines)


def format_suite(suite: Suite) -> str:
    """List the binaries and tests of *suite* with their commands."""
    lines = [format_section_header("Binaries")]
    lines.append(
        format_table(
            ["name", "executable"],
            [[b.name, b.executable] for b in suite.binaries],
            max_col_width={1: MAX_COMMAND_WIDTH},
        )
    )
    lines.append("")
    lines.append(format_section_header("Tests"))
    lines.append(
        format_table(
            ["name", "arguments"],
            [[t.name, suite.tests_root + t.args] for t in suite.tests],
            max_col_width={0: MAX_LABEL_WIDTH, 1: MAX_COMMAND_WIDTH},
        )
    )
    if suite.setup or suite.teardown:
        lines.append("")
        if suite.setup:
            lines.append(f"  setup:    {suite.setup}")
        if suite.teardown:
            lines.append(f"  teardown: {suite.teardown}")
    return "\n".join(lines)
