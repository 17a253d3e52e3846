"""
Running external tools (the Go toolchain) for package resolution.

Commands never go through a shell and never read stdin; output is captured
and decoded leniently so that a broken toolchain cannot fail the decode.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import IgnoreCovError

Argv = Sequence[str | os.PathLike[str]]

_TAIL_LINES = 20


class ExecError(IgnoreCovError):
    """A command could not start or exited non-zero."""


@dataclass(frozen=True, slots=True)
class RunResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def quote_for_display(s: str) -> str:
    # Log-friendly quoting only; use shlex for anything a shell will read.
    if s and not any(c.isspace() or c in {'"', "\\"} for c in s):
        return s
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def format_command(argv: Argv) -> str:
    return " ".join(quote_for_display(os.fspath(a)) for a in argv)


def run_captured(
    argv: Argv,
    *,
    cwd: Path | None = None,
) -> RunResult:
    """Run `argv` and capture both streams. A non-zero exit is returned, not raised."""
    if not argv:
        raise ValueError("argv must be non-empty")

    try:
        cp = subprocess.run(
            [os.fspath(a) for a in argv],
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=False,
        )
    except OSError as e:
        raise ExecError(f"cannot run {format_command(argv)}: {e}") from e

    return RunResult(
        returncode=cp.returncode,
        stdout=cp.stdout.decode("utf-8", errors="replace"),
        stderr=cp.stderr.decode("utf-8", errors="replace"),
    )


def run_checked(
    argv: Argv,
    *,
    cwd: Path | None = None,
) -> RunResult:
    """Like `run_captured`, but a non-zero exit raises ExecError with both output tails."""
    res = run_captured(argv, cwd=cwd)
    if res.ok:
        return res

    cmd = shlex.join(os.fspath(a) for a in argv)
    raise ExecError(
        f"command failed with exit code {res.returncode}: {cmd}\n"
        f"--- stdout (last {_TAIL_LINES} lines) ---\n"
        f"{_tail_lines(res.stdout, _TAIL_LINES)}\n"
        f"--- stderr (last {_TAIL_LINES} lines) ---\n"
        f"{_tail_lines(res.stderr, _TAIL_LINES)}"
    )


def _tail_lines(text: str, n: int) -> str:
    lines = text.rstrip("\n").splitlines()
    return "\n".join(lines[-n:]) if n > 0 else ""
