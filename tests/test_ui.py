from __future__ import annotations

import io

from rich.console import Console

from go_ignore_cov.ui import RunUI, format_elapsed


def _ui(verbose: bool) -> tuple[RunUI, io.StringIO, io.StringIO]:
    out, err = io.StringIO(), io.StringIO()
    ui = RunUI(
        verbose=verbose,
        console=Console(file=out, width=200, no_color=True),
        err_console=Console(file=err, width=200, no_color=True),
    )
    return ui, out, err


def test_quiet_mode_prints_only_log_and_errors() -> None:
    ui, out, err = _ui(verbose=False)
    ui.debug("detail")
    ui.warn("skipped a file")
    with ui.step("scan sources"):
        pass
    ui.log("Finished in 1.000s")
    ui.error("ERROR: boom")
    assert out.getvalue() == "Finished in 1.000s\n"
    assert err.getvalue() == "ERROR: boom\n"


def test_verbose_mode_prints_debug_warn_and_steps() -> None:
    ui, out, err = _ui(verbose=True)
    ui.debug("detail")
    ui.warn("skipped a file")
    with ui.step("scan sources"):
        pass
    lines = out.getvalue().splitlines()
    assert lines[:3] == ["detail", "Warning: skipped a file", "==> scan sources"]
    assert lines[3].startswith("<== scan sources (")
    assert err.getvalue() == ""


def test_format_elapsed() -> None:
    assert format_elapsed(0.0125) == "12.500ms"
    assert format_elapsed(2.0) == "2.000s"
