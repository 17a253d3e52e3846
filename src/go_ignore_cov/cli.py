from __future__ import annotations

import time
from pathlib import Path
from typing import Annotated

import typer

from . import __version__
from .app import run as run_rewrite
from .config import Config, split_patterns
from .errors import ConfigError, IgnoreCovError
from .ui import RunUI, format_elapsed

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
    help="Mark ignored code as covered in a golang coverage output file.",
)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _resolve_root(root: Path | None, ui: RunUI) -> Path:
    if root is not None:
        return root
    cwd = Path.cwd()
    ui.debug(f"Module root not defined, using {cwd} working directory as root")
    return cwd


@app.command()
def rewrite(
    file: Annotated[
        Path,
        typer.Option(
            "--file",
            "-f",
            help="Input coverage file.",
            dir_okay=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output coverage file (defaults to rewriting --file in place).",
            dir_okay=False,
        ),
    ] = None,
    root: Annotated[
        Path | None,
        typer.Option(
            "--root",
            "-r",
            help="Module root (defaults to current working directory).",
            envvar="GO_IGNORE_COV_ROOT",
            file_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose output.",
            envvar="GO_IGNORE_COV_VERBOSE",
        ),
    ] = False,
    exclude_globs: Annotated[
        str | None,
        typer.Option(
            "--exclude-globs",
            "-g",
            help='Comma-separated glob patterns to exclude (e.g. "**/test/**,**/*_gen.go").',
            envvar="GO_IGNORE_COV_EXCLUDE_GLOBS",
        ),
    ] = None,
    exclude_regex: Annotated[
        str | None,
        typer.Option(
            "--exclude-regex",
            "-x",
            help='Comma-separated regex patterns to exclude (e.g. "/test/,.*_gen\\.go$").',
            envvar="GO_IGNORE_COV_EXCLUDE_REGEX",
        ),
    ] = None,
    ignore_empty: Annotated[
        bool,
        typer.Option(
            "--ignore-empty",
            help="Mark blocks with zero statements as covered.",
        ),
    ] = False,
    merge_duplicates: Annotated[
        bool,
        typer.Option(
            "--merge-duplicates",
            help="Merge blocks repeated across -coverpkg runs before rewriting.",
        ),
    ] = False,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            help="Source scanner threads (defaults to CPU count).",
            envvar="GO_IGNORE_COV_WORKERS",
            min=1,
        ),
    ] = None,
    suffix: Annotated[
        str,
        typer.Option(
            "--suffix",
            help="Source file suffix to scan for ignore comments.",
        ),
    ] = ".go",
    color: Annotated[
        str,
        typer.Option(
            "--color",
            help="Color output mode (auto|always|never).",
            envvar="GO_IGNORE_COV_COLOR",
            show_default=True,
        ),
    ] = "auto",
    print_version: Annotated[
        bool,
        typer.Option(
            "--print-version",
            "-V",
            help="Print only the version.",
            callback=_print_version,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """
    Rewrite a coverage profile so ignored code reads as covered.

    Blocks are excluded by `//coverage:ignore` comments in the sources under
    --root, or wholesale by --exclude-globs / --exclude-regex (patterns win).
    """
    started = time.monotonic()

    color_norm = color.strip().lower()
    if color_norm not in {"auto", "always", "never"}:
        typer.secho(
            f"CONFIG ERROR: Invalid --color value: {color!r} (expected one of: auto, always, never)",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=2)

    ui = RunUI(verbose=verbose, color=color_norm)

    cfg = Config(
        coverage_file=file,
        root=_resolve_root(root, ui),
        output=output,
        exclude_globs=split_patterns(exclude_globs),
        exclude_regex=split_patterns(exclude_regex),
        verbose=verbose,
        ignore_empty=ignore_empty,
        merge_duplicates=merge_duplicates,
        workers=workers,
        source_suffix=suffix,
    )

    try:
        run_rewrite(cfg, ui=ui)
    except ConfigError as e:
        ui.error(f"CONFIG ERROR: {e}")
        raise typer.Exit(code=2) from e
    except IgnoreCovError as e:
        ui.error(f"ERROR: {e}")
        raise typer.Exit(code=1) from e

    ui.log(f"Finished in {format_elapsed(time.monotonic() - started)}")


def main() -> None:
    """
    Programmatic entrypoint used by `project.scripts`.
    """
    app(prog_name="go-ignore-cov")


if __name__ == "__main__":
    main()
