"""Command-line interface for runbench.

Runs every test of a suite under every binary, keeps the fastest of
``--nruns`` runs, and writes ``<output>.txt`` plus a gnuplot chart.
"""

from __future__ import annotations

from pathlib import Path

import click

from runbench import __version__
from runbench.logging import setup_logging


@click.command()
@click.version_option(version=__version__)
@click.option(
    "--suite",
    "suite_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file defining tests and binaries (default: built-in Lua suite).",
)
@click.option(
    "--binary",
    "binary_specs",
    type=str,
    multiple=True,
    help="Binary as NAME=EXECUTABLE (repeatable, replaces the suite's binaries).",
)
@click.option(
    "--test",
    "test_specs",
    type=str,
    multiple=True,
    help="Test as NAME=ARGS (repeatable, replaces the suite's tests).",
)
@click.option(
    "--tests-root",
    type=str,
    default=None,
    help="Prefix joined to every test's arguments (default: ./).",
)
@click.option(
    "--nruns",
    type=click.IntRange(min=1),
    default=3,
    show_default=True,
    help="Number of times each test is executed.",
)
@click.option(
    "--no-suppress",
    "no_suppress",
    is_flag=True,
    default=False,
    help="Don't suppress error messages from tests.",
)
@click.option(
    "--output",
    "basename",
    type=str,
    default="results",
    show_default=True,
    help="Base name of the benchmark output files.",
)
@click.option("--normalize", is_flag=True, default=False, help="Normalize by the first binary.")
@click.option("--speedup", is_flag=True, default=False, help="Speedup over the first binary.")
@click.option("--no-plot", is_flag=True, default=False, help="Don't create the plot with gnuplot.")
@click.option(
    "--plot-script",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="gnuplot script to use instead of the bundled one.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-run timeout in seconds; timed-out cells count as failures.",
)
@click.option("--list", "list_only", is_flag=True, help="List tests and binaries, then exit.")
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show errors.")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Also write a DEBUG log to this file.",
)
def main(  # noqa: PLR0913
    suite_path: Path | None,
    binary_specs: tuple[str, ...],
    test_specs: tuple[str, ...],
    tests_root: str | None,
    nruns: int,
    no_suppress: bool,
    basename: str,
    normalize: bool,
    speedup: bool,
    no_plot: bool,
    plot_script: Path | None,
    timeout: float | None,
    list_only: bool,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Benchmark interpreter binaries against a suite of test scripts.

    \b
    Examples:
        # Built-in suite: lua vs luajit
        runbench

        # Speedup of two builds on a custom suite, no chart
        runbench --suite suite.yaml --speedup --no-plot

        # Ad-hoc comparison
        runbench --binary lua=lua5.4 --binary jit=luajit \\
            --test queen="queen.lua 12" --nruns 5
    """
    import subprocess
    from dataclasses import replace

    from runbench.config import (
        BinaryDef,
        HarnessConfig,
        TestDef,
        default_suite,
        load_suite,
        parse_pair,
    )

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    if speedup and normalize:
        raise click.UsageError("--speedup and --normalize are mutually exclusive")

    try:
        suite = load_suite(suite_path) if suite_path else default_suite()
        if binary_specs:
            binaries = tuple(BinaryDef(*parse_pair(s, "--binary")) for s in binary_specs)
            suite = replace(suite, binaries=binaries)
        if test_specs:
            tests = tuple(TestDef(*parse_pair(s, "--test")) for s in test_specs)
            suite = replace(suite, tests=tests)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc
    if tests_root is not None:
        suite = replace(suite, tests_root=tests_root)

    if list_only:
        from runbench.display import format_suite

        click.echo(format_suite(suite))
        return

    config = HarnessConfig(
        runs=nruns,
        suppress_errors=not no_suppress,
        basename=basename,
        normalize=normalize,
        speedup=speedup,
        plot=not no_plot,
        timeout=timeout,
        plot_script=plot_script,
    )

    from runbench.display import format_results
    from runbench.harness import run_harness

    try:
        result = run_harness(config, suite)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except subprocess.CalledProcessError as exc:
        click.echo(f"Error: suite command failed (exit {exc.returncode}): {exc.cmd}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904

    click.echo()
    click.echo(format_results(result.matrix, config.mode, config.runs))
    click.echo()
    click.echo(f"Results saved to: {result.data_path}")
    if result.image_path is not None:
        click.echo(f"Plot: {result.image_path}")

    if result.interrupted:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)
