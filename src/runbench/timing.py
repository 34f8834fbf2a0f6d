"""Wall-clock timing of a single benchmark command.

The command runs under the shell's ``time`` keyword with
``TIMEFORMAT='%3R'``, so the only thing the wrapper prints is the
elapsed real time in seconds with three decimals.  The command's own
stdout is discarded; its stderr is merged into the captured text so a
failing command surfaces its error message instead of a number.
"""

from __future__ import annotations

import logging
import math
import os
import signal
import subprocess

from runbench.errors import CommandTimeout, ParseError

log = logging.getLogger("runbench")

TIME_FORMAT = "%3R"

# Categories that stand in for LC_ALL once it is removed.
_LOCALE_CATEGORIES = ("LC_CTYPE", "LC_COLLATE", "LC_MESSAGES", "LC_MONETARY", "LC_TIME")


def wrap_command(command: str) -> str:
    """Return *command* wrapped so the shell reports its elapsed time.

    >>> wrap_command("lua ack.lua 3 10")
    "{ TIMEFORMAT='%3R'; time lua ack.lua 3 10 > /dev/null; } 2>&1"
    """
    return f"{{ TIMEFORMAT='{TIME_FORMAT}'; time {command} > {os.devnull}; }} 2>&1"


def timing_env() -> dict[str, str]:
    """Environment for the timing shell.

    ``time`` prints with the locale's decimal separator, so the numeric
    locale is forced to ``C``.  ``LC_ALL`` would override that, so its
    value is moved to the other categories.
    """
    env = dict(os.environ)
    lc_all = env.pop("LC_ALL", None)
    if lc_all:
        for category in _LOCALE_CATEGORIES:
            env[category] = lc_all
    env["LC_NUMERIC"] = "C"
    return env


def parse_elapsed(command: str, output: str) -> float:
    """Parse the captured timing text into seconds.

    Raises:
        ParseError: If *output* is not a single non-negative number.
    """
    try:
        elapsed = float(output.strip())
    except ValueError:
        raise ParseError(command, output) from None
    if not math.isfinite(elapsed) or elapsed < 0:
        raise ParseError(command, output)
    return elapsed


def measure(
    command: str,
    *,
    timeout: float | None = None,
    shell: str = "bash",
) -> float:
    """Run *command* once and return its wall-clock duration in seconds.

    Args:
        command: Full shell command (binary plus test arguments).
        timeout: Seconds before the child's process group is killed.
            ``None`` waits forever.
        shell: Shell providing the ``time`` keyword and ``TIMEFORMAT``.

    Raises:
        ParseError: The captured output was not a timing line.
        CommandTimeout: *timeout* elapsed before the command exited.
        OSError: The shell itself could not be started.
    """
    wrapped = wrap_command(command)
    log.debug("exec: %s", wrapped)

    proc = subprocess.Popen(
        [shell, "-c", wrapped],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        env=timing_env(),
        encoding="utf-8",
        errors="replace",
        start_new_session=True,
    )
    try:
        output, _ = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_process_group(proc.pid)
        try:
            proc.communicate(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.communicate()
        raise CommandTimeout(command, timeout or 0.0) from None
    except BaseException:
        # The child has its own session, so Ctrl-C never reaches it.
        _kill_process_group(proc.pid)
        proc.wait()
        raise

    return parse_elapsed(command, output)


def _kill_process_group(pid: int) -> None:
    """Attempt to kill the entire process group of a benchmark command."""
    try:
        os.killpg(os.getpgid(pid), signal.SIGKILL)
    except (ProcessLookupError, PermissionError, OSError):
        pass
