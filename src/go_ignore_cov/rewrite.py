from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from .collect import SourceFileIgnores
from .instructions import IgnoreEmpty, PatternIgnore
from .patterns import PatternSet
from .report import CoverageReport


@dataclass(slots=True)
class RewriteStats:
    comment_exclusions: int = 0
    pattern_exclusions: int = 0
    empty_exclusions: int = 0
    blocks_changed: int = 0


def apply_ignores(
    report: CoverageReport,
    ignores_by_path: Mapping[str, SourceFileIgnores],
    resolve: Callable[[str], str],
    *,
    patterns: PatternSet | None = None,
    ignore_empty: bool = False,
    log: Callable[[str], None] | None = None,
) -> RewriteStats:
    """
    Mark excluded blocks of `report` as covered, in place.

    For each file entry, a matching exclusion pattern wins and the file's
    comments are not consulted. Otherwise the comment instructions found for
    the resolved path apply. With `ignore_empty`, zero-statement blocks are
    marked in every entry afterwards.
    """
    stats = RewriteStats()
    empty = IgnoreEmpty()

    for profile in report.files:
        path = resolve(profile.file_name)

        matched_by = patterns.match(path) if patterns is not None else None
        if matched_by is not None:
            stats.blocks_changed += PatternIgnore(matched_by=matched_by).apply(profile, log)
            stats.pattern_exclusions += 1
        else:
            ignore = ignores_by_path.get(path)
            if ignore is not None:
                for instruction in ignore.instructions:
                    stats.blocks_changed += instruction.apply(profile, log)
                stats.comment_exclusions += 1

        if ignore_empty:
            changed = empty.apply(profile, log)
            if changed:
                stats.blocks_changed += changed
                stats.empty_exclusions += 1

    return stats
