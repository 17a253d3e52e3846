from __future__ import annotations

from pathlib import Path

from go_ignore_cov.collect import SourceFileIgnores
from go_ignore_cov.instructions import IgnoreBlock, IgnoreFile
from go_ignore_cov.patterns import build_pattern_set
from go_ignore_cov.report import dump_report, parse_report
from go_ignore_cov.rewrite import apply_ignores

PROFILE = (
    "mode: set\n"
    "m/a/a.go:1.10,4.2 2 0\n"
    "m/a/a.go:2.5,3.3 1 0\n"
    "m/b/b.go:1.1,5.2 3 0\n"
    "m/c/c.go:1.1,2.2 0 0\n"
    "m/c/c.go:3.1,6.2 2 0\n"
)


def _resolve(file_name: str) -> str:
    return "/src/" + file_name


def test_comment_instructions_apply_to_resolved_paths() -> None:
    report = parse_report(PROFILE)
    ignores = {
        "/src/m/a/a.go": SourceFileIgnores("/src/m/a/a.go", (IgnoreBlock(line=3, col=1),)),
        "/src/m/b/b.go": SourceFileIgnores("/src/m/b/b.go", (IgnoreFile(),)),
    }
    stats = apply_ignores(report, ignores, _resolve)
    assert dump_report(report) == (
        "mode: set\n"
        "m/a/a.go:1.10,4.2 2 1\n"
        "m/a/a.go:2.5,3.3 1 1\n"
        "m/b/b.go:1.1,5.2 3 1\n"
        "m/c/c.go:1.1,2.2 0 0\n"
        "m/c/c.go:3.1,6.2 2 0\n"
    )
    assert stats.comment_exclusions == 2
    assert stats.pattern_exclusions == 0
    assert stats.blocks_changed == 3


def test_pattern_match_wins_over_comments(tmp_path: Path) -> None:
    report = parse_report(PROFILE)
    root = tmp_path.resolve()
    patterns = build_pattern_set(["m/a/**"], [], root)
    ignores = {
        str(root / "m/a/a.go"): SourceFileIgnores(str(root / "m/a/a.go"), (IgnoreBlock(line=3, col=1),)),
    }
    lines: list[str] = []
    stats = apply_ignores(
        report,
        ignores,
        lambda name: str(root / name),
        patterns=patterns,
        log=lines.append,
    )
    assert [b.count for b in report.files[0].blocks] == [1, 1]
    assert stats.pattern_exclusions == 1
    assert stats.comment_exclusions == 0
    assert lines == [
        "Setting coverage blocks [all] count to 1 for m/a/a.go (matched by glob pattern 'm/a/**')"
    ]


def test_ignore_empty_runs_after_other_rules() -> None:
    report = parse_report(PROFILE)
    stats = apply_ignores(report, {}, _resolve, ignore_empty=True)
    assert [b.count for b in report.files[2].blocks] == [1, 0]
    assert stats.empty_exclusions == 1
    assert stats.blocks_changed == 1


def test_nothing_to_apply_leaves_report_unchanged() -> None:
    report = parse_report(PROFILE)
    stats = apply_ignores(report, {}, _resolve)
    assert dump_report(report) == PROFILE
    assert stats.blocks_changed == 0
