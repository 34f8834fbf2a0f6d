"""Harness configuration and benchmark suite definitions.

Handles:
- The immutable :class:`HarnessConfig` built once per run.
- Test and binary definitions, grouped into a :class:`Suite`.
- The built-in default suite (``lua`` vs ``luajit``).
- Loading suites from YAML files.
- Validating the final configuration before execution.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DATA_SUFFIX = ".txt"
IMAGE_SUFFIX = ".png"


# ---------------------------------------------------------------------------
# Suite definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TestDef:
    """A benchmark workload: a display label and the arguments passed
    to each binary (script path, parameters, input redirection)."""

    __test__ = False  # Not a pytest test class.

    name: str
    args: str


@dataclass(frozen=True)
class BinaryDef:
    """An interpreter under test: a display label and its executable."""

    name: str
    executable: str


@dataclass(frozen=True)
class Suite:
    """The tests and binaries of a benchmark run, in declaration order."""

    tests: tuple[TestDef, ...]
    binaries: tuple[BinaryDef, ...]
    tests_root: str = "./"
    setup: str | None = None  # Shell command run before measuring
    teardown: str | None = None  # Shell command run after measuring

    def command_for(self, test: TestDef, binary: BinaryDef) -> str:
        """Build the shell command that runs *test* under *binary*."""
        return f"{binary.executable} {self.tests_root}{test.args}"


def default_suite() -> Suite:
    """The stock Lua benchmark suite: ``lua`` against ``luajit``."""
    return Suite(
        binaries=(
            BinaryDef("lua", "lua"),
            BinaryDef("luajit", "luajit"),
        ),
        tests=(
            TestDef("ack", "ack.lua 3 10"),
            TestDef("fixpoint-fact", "fixpoint-fact.lua 3000"),
            TestDef("heapsort", "heapsort.lua 10 250000"),
            TestDef("mandelbrot", "mandel.lua"),
            TestDef("juliaset", "qt.lua"),
            TestDef("queen", "queen.lua 12"),
            TestDef("sieve", "sieve.lua 5000"),  # Sieve of Eratosthenes
            TestDef("binary", "binary-trees.lua 17"),
            TestDef("n-body", "n-body.lua 5000000"),
            TestDef("fannkuch", "fannkuch-redux.lua 10"),
            TestDef("fasta", "fasta.lua 2500000"),
            TestDef("k-nucleotide", "k-nucleotide.lua < fasta2500000.txt"),
            TestDef("regex-dna", "regex-dna.lua < fasta2500000.txt"),
            TestDef("spectral-norm", "spectral-norm.lua 2000"),
        ),
    )


# ---------------------------------------------------------------------------
# HarnessConfig
# ---------------------------------------------------------------------------


class Mode(enum.Enum):
    """How raw durations are rewritten before the report is written."""

    RAW = "raw"
    SPEEDUP = "speedup"  # first column / cell
    NORMALIZE = "normalize"  # cell / first column


@dataclass(frozen=True)
class HarnessConfig:
    """Resolved configuration for a benchmark run."""

    runs: int = 3  # Trials per (test, binary); the fastest is kept
    suppress_errors: bool = True
    basename: str = "results"
    normalize: bool = False
    speedup: bool = False
    plot: bool = True
    timeout: float | None = None  # Per-trial timeout in seconds
    plot_script: Path | None = None  # None = bundled plot.gpi

    @property
    def mode(self) -> Mode:
        """The active transformation.  Speedup wins if both flags are set,
        but :func:`validate_config` rejects that combination."""
        if self.speedup:
            return Mode.SPEEDUP
        if self.normalize:
            return Mode.NORMALIZE
        return Mode.RAW

    @property
    def data_path(self) -> Path:
        """Path of the tab-separated data file."""
        return Path(f"{self.basename}{DATA_SUFFIX}")

    @property
    def image_path(self) -> Path:
        """Path of the rendered plot."""
        return Path(f"{self.basename}{IMAGE_SUFFIX}")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: HarnessConfig, suite: Suite) -> list[ValidationError]:
    """Validate a harness configuration against its suite.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if config.runs < 1:
        errors.append(
            ValidationError(
                field="runs",
                message=f"Number of runs must be at least 1 (got {config.runs}).",
            )
        )

    if config.speedup and config.normalize:
        errors.append(
            ValidationError(
                field="speedup",
                message="--speedup and --normalize are mutually exclusive. Choose one.",
            )
        )

    if config.timeout is not None and config.timeout <= 0:
        errors.append(
            ValidationError(
                field="timeout",
                message=f"Timeout must be positive (got {config.timeout}).",
            )
        )

    if not config.basename.strip():
        errors.append(
            ValidationError(
                field="basename",
                message="Output name cannot be empty.",
            )
        )

    if config.plot_script is not None and not config.plot_script.is_file():
        errors.append(
            ValidationError(
                field="plot_script",
                message=f"Plot script does not exist: {config.plot_script}",
            )
        )

    if not suite.tests:
        errors.append(ValidationError(field="tests", message="No tests defined."))
    if not suite.binaries:
        errors.append(ValidationError(field="binaries", message="No binaries defined."))

    errors.extend(_check_labels("tests", [t.name for t in suite.tests]))
    errors.extend(_check_labels("binaries", [b.name for b in suite.binaries]))

    for binary in suite.binaries:
        if not binary.executable.strip():
            errors.append(
                ValidationError(
                    field=f"binaries.{binary.name}",
                    message=f"Binary '{binary.name}' has no executable.",
                )
            )

    return errors


def _check_labels(field_name: str, labels: list[str]) -> list[ValidationError]:
    """Labels end up as data file columns/rows: non-empty, unique, no tabs."""
    errors: list[ValidationError] = []
    seen: set[str] = set()
    for label in labels:
        if not label or not label.strip():
            errors.append(
                ValidationError(field=field_name, message="Names must be non-empty.")
            )
            continue
        if "\t" in label or "\n" in label:
            errors.append(
                ValidationError(
                    field=field_name,
                    message=f"Name '{label}' cannot contain tabs or newlines.",
                )
            )
        if label in seen:
            errors.append(
                ValidationError(
                    field=field_name,
                    message=f"Duplicate name '{label}'.",
                    severity="warning",
                )
            )
        seen.add(label)
    return errors


# ---------------------------------------------------------------------------
# YAML suite loading
# ---------------------------------------------------------------------------


def load_suite(suite_path: Path) -> Suite:
    """Load a benchmark suite from a YAML file.

    Suite format::

        tests_root: "benchmarks/"
        setup: "luajit benchmarks/fasta.lua 2500000 > fasta2500000.txt"
        teardown: "rm fasta2500000.txt"

        binaries:
          - name: lua
            executable: /usr/bin/lua5.4
          - name: luajit
            executable: luajit

        tests:
          ack: "ack.lua 3 10"
          k-nucleotide: "k-nucleotide.lua < fasta2500000.txt"

    ``binaries`` and ``tests`` may each be a list of mappings or a
    ``name: value`` mapping.

    Raises:
        FileNotFoundError: If *suite_path* does not exist.
        ValueError: If the file is not a valid suite.
    """
    import yaml

    if not suite_path.exists():
        raise FileNotFoundError(f"Suite not found: {suite_path}")

    data = yaml.safe_load(suite_path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Suite must be a YAML mapping, got {type(data).__name__}")

    return suite_from_dict(data)


def suite_from_dict(data: dict[str, Any]) -> Suite:
    """Build a Suite from parsed YAML data."""
    binaries = tuple(
        BinaryDef(name, value)
        for name, value in _named_entries(data.get("binaries", []), "binaries", "executable")
    )
    tests = tuple(
        TestDef(name, value) for name, value in _named_entries(data.get("tests", []), "tests", "args")
    )

    tests_root = data.get("tests_root", "./")
    if tests_root is None:
        tests_root = ""
    if not isinstance(tests_root, str):
        raise ValueError("Suite 'tests_root' must be a string")

    return Suite(
        tests=tests,
        binaries=binaries,
        tests_root=tests_root,
        setup=_optional_str(data, "setup"),
        teardown=_optional_str(data, "teardown"),
    )


def _named_entries(raw: Any, section: str, value_key: str) -> list[tuple[str, str]]:
    """Normalize a ``binaries``/``tests`` section to ``(name, value)`` pairs."""
    if isinstance(raw, dict):
        items = [{"name": k, value_key: v} for k, v in raw.items()]
    elif isinstance(raw, list):
        items = raw
    else:
        raise ValueError(f"Suite '{section}' must be a list or a mapping")

    entries: list[tuple[str, str]] = []
    for item in items:
        if not isinstance(item, dict):
            raise ValueError(f"Entry in '{section}' must be a mapping, got {type(item).__name__}")
        name = item.get("name")
        value = item.get(value_key)
        if name is None or value is None:
            raise ValueError(f"Entry in '{section}' needs 'name' and '{value_key}': {item!r}")
        entries.append((str(name), str(value)))
    return entries


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Suite '{key}' must be a string")
    return value or None


# ---------------------------------------------------------------------------
# Inline definitions
# ---------------------------------------------------------------------------


def parse_pair(spec: str, option: str) -> tuple[str, str]:
    """Parse a ``NAME=VALUE`` CLI definition.

    Examples::

        "luajit=/opt/luajit/bin/luajit"
        "queen=queen.lua 12"

    Raises:
        ValueError: If *spec* has no ``=`` or an empty name or value.
    """
    if "=" not in spec:
        raise ValueError(f"Invalid {option} '{spec}'. Expected format: 'NAME=VALUE'")
    name, value = spec.split("=", 1)
    name = name.strip()
    value = value.strip()
    if not name or not value:
        raise ValueError(f"Invalid {option} '{spec}'. Name and value cannot be empty.")
    return name, value
