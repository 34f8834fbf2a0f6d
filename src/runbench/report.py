"""Data file output and plot rendering.

Data file format (what ``plot.gpi`` reads)::

    test    lua         luajit
    ack     1.234000    0.210000
    queen   2.500000    0.480000

Tab-separated, one header line, then one line per test.  Values use
six fixed decimals so runs diff cleanly.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from importlib import resources
from pathlib import Path

from runbench.config import DATA_SUFFIX, IMAGE_SUFFIX
from runbench.matrix import ResultsMatrix

log = logging.getLogger("runbench")

HEADER_LABEL = "test"


def format_value(value: float | None) -> str:
    if value is None:
        return "0"
    return f"{value:.6f}"


def format_data_file(matrix: ResultsMatrix) -> str:
    """Serialize *matrix* to the tab-separated data file layout."""
    lines = ["\t".join([HEADER_LABEL] + [b.name for b in matrix.binaries])]
    for test, row in matrix.rows():
        lines.append("\t".join([test.name] + [format_value(v) for v in row]))
    return "\n".join(lines) + "\n"


def data_path_for(basename: str | Path) -> Path:
    return Path(f"{basename}{DATA_SUFFIX}")


def image_path_for(basename: str | Path) -> Path:
    return Path(f"{basename}{IMAGE_SUFFIX}")


def write_data_file(matrix: ResultsMatrix, basename: str | Path) -> Path:
    """Atomically write ``<basename>.txt`` and return its path.

    The text goes to a temporary file in the same directory which then
    replaces the target, so readers never see a partial file.
    """
    path = data_path_for(basename)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = format_data_file(matrix)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        # mkstemp creates 0600; give the report the mode open() would.
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    log.debug("Wrote %d bytes to %s", len(text), path)
    return path


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def default_plot_script() -> Path:
    """Path of the ``plot.gpi`` shipped with runbench."""
    return Path(str(resources.files("runbench").joinpath("plot.gpi")))


def plot_command(
    data_path: Path,
    image_path: Path,
    n_binaries: int,
    script: Path,
) -> list[str]:
    """The gnuplot argument vector for rendering *data_path*."""
    return [
        "gnuplot",
        "-e",
        f"datafile='{data_path}'",
        "-e",
        f"outfile='{image_path}'",
        "-e",
        f"nbinaries={n_binaries}",
        str(script),
    ]


def render_plot(
    data_path: Path,
    image_path: Path,
    n_binaries: int,
    *,
    script: Path | None = None,
) -> None:
    """Render *data_path* to *image_path* with gnuplot.

    The exit status is not checked; gnuplot reports its own problems
    on stderr.  A missing ``gnuplot`` executable raises ``OSError``.
    """
    cmd = plot_command(data_path, image_path, n_binaries, script or default_plot_script())
    log.debug("exec: %s", " ".join(cmd))
    subprocess.run(cmd, check=False)
