"""Exceptions raised while measuring benchmark commands.

Both are caught at the matrix builder and turned into
:class:`~runbench.matrix.CellFailure` values; nothing here is fatal to
a run.
"""

from __future__ import annotations


class RunbenchError(Exception):
    """Base class for measurement errors."""


class ParseError(RunbenchError):
    """The timing output of a command could not be read as seconds."""

    def __init__(self, command: str, output: str) -> None:
        self.command = command
        self.output = output
        super().__init__(f'Invalid output for "{command}":\n{output}')


class CommandTimeout(RunbenchError):
    """A command ran longer than the configured timeout and was killed."""

    def __init__(self, command: str, timeout: float) -> None:
        self.command = command
        self.timeout = timeout
        super().__init__(f'"{command}" timed out after {timeout:g}s')
