from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.text import Text


def _console_for_color_mode(color: str, *, stderr: bool = False) -> Console:
    mode = color.strip().lower()
    if mode == "always":
        # Emit ANSI color codes even when stdout is not a TTY (useful for piping to `tail`).
        return Console(force_terminal=True, stderr=stderr)
    if mode == "never":
        return Console(no_color=True, stderr=stderr)
    if mode == "auto":
        return Console(stderr=stderr)
    raise ValueError(f"Invalid color mode: {color!r} (expected auto|always|never)")


def format_elapsed(seconds: float) -> str:
    if seconds < 1.0:
        return f"{seconds * 1000.0:.3f}ms"
    return f"{seconds:.3f}s"


class RunUI:
    """
    Plain line-oriented output for the rewriter.

    - `log` always prints.
    - `debug` and `warn` print only in verbose mode; `warn` is used for
      recoverable per-file problems that do not stop the run.
    - `error` always prints, to stderr.
    """

    def __init__(
        self,
        *,
        verbose: bool = False,
        color: str = "auto",
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        self.verbose = verbose
        self.console = console if console is not None else _console_for_color_mode(color)
        self.err_console = (
            err_console
            if err_console is not None
            else _console_for_color_mode(color, stderr=True)
        )

    def log(self, message: str, *, style: str | None = None) -> None:
        text = Text(message)
        if style is not None:
            text.stylize(style)
        self.console.print(text)

    def debug(self, message: str) -> None:
        if self.verbose:
            self.log(message)

    def warn(self, message: str) -> None:
        if self.verbose:
            self.log(f"Warning: {message}", style="yellow")

    def error(self, message: str) -> None:
        self.err_console.print(Text(message, style="bold red"))

    @contextmanager
    def step(self, title: str) -> Iterator[None]:
        if not self.verbose:
            yield
            return

        started = time.monotonic()
        self.console.print(Text("==> ", style="bold cyan") + Text(title))
        try:
            yield
        finally:
            elapsed = format_elapsed(time.monotonic() - started)
            self.console.print(
                Text("<== ", style="bold cyan") + Text(title) + Text(f" ({elapsed})", style="dim")
            )
