from __future__ import annotations

import functools
from dataclasses import dataclass
from pathlib import Path

from .collect import collect_ignores
from .config import Config, validate_config
from .errors import OutputError
from .patterns import PatternSet, build_pattern_set
from .report import CoverageReport, dump_report, merge_duplicate_blocks, read_report
from .resolve import PackageResolver, build_package_cache, default_resolver, resolve_file
from .rewrite import RewriteStats, apply_ignores
from .ui import RunUI


@dataclass(frozen=True, slots=True)
class RunOutcome:
    output: Path
    files: int
    blocks: int
    stats: RewriteStats


def run(cfg: Config, *, ui: RunUI, resolver: PackageResolver | None = None) -> RunOutcome:
    """
    Rewrite one coverage profile.

    Phases run strictly in order; only the source scan is concurrent:
      - pattern compilation (fails fast on a bad regex)
      - source tree scan for ignore comments
      - profile parse (and optional duplicate merge)
      - package directory resolution
      - block rewriting and output

    The caller (CLI) is responsible for translating failures into exit codes.
    """
    validate_config(cfg)
    root = cfg.root.resolve()
    if cfg.root != root:
        ui.debug(f"Module root resolved to {root}")

    patterns: PatternSet | None = None
    if cfg.has_patterns():
        patterns = build_pattern_set(cfg.exclude_globs, cfg.exclude_regex, root)
        ui.debug(
            f"Pattern matcher configured with {len(patterns.globs)} glob patterns "
            f"and {len(patterns.regexes)} regex patterns"
        )

    with ui.step("scan sources"):
        ignores = collect_ignores(
            root,
            workers=cfg.effective_workers(),
            suffix=cfg.source_suffix,
            ui=ui,
        )

    report = read_report(cfg.coverage_file)
    if cfg.merge_duplicates:
        removed = merge_duplicate_blocks(report)
        ui.debug(f"Merged {removed} duplicate blocks")

    with ui.step("resolve packages"):
        cache = build_package_cache(
            report,
            resolver if resolver is not None else default_resolver(root),
            ui=ui,
        )

    with ui.step("apply exclusions"):
        stats = apply_ignores(
            report,
            ignores,
            functools.partial(resolve_file, cache=cache),
            patterns=patterns,
            ignore_empty=cfg.ignore_empty,
            log=ui.debug if ui.verbose else None,
        )
    ui.debug(f"  - {stats.comment_exclusions} profiles excluded by comments")
    ui.debug(f"  - {stats.pattern_exclusions} profiles excluded by patterns")
    if cfg.ignore_empty:
        ui.debug(f"  - {stats.empty_exclusions} profiles with empty blocks marked")

    output = cfg.output_path()
    ui.debug(f"Writing updated coverage to {output} ...")
    write_output(report, output)

    return RunOutcome(
        output=output,
        files=len(report.files),
        blocks=sum(len(p.blocks) for p in report.files),
        stats=stats,
    )


def write_output(report: CoverageReport, output: Path) -> None:
    text = dump_report(report)
    try:
        output.write_text(text, encoding="utf-8", newline="\n")
    except OSError as e:
        raise OutputError(f"cannot write coverage file {output}: {e}") from e
