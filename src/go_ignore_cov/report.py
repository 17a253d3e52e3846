"""
Go coverage profile codec.

Format:
    mode: <set|count|atomic>
    <file>:<startLine>.<startCol>,<endLine>.<endCol> <numStmt> <count>
"""

from __future__ import annotations

import enum
import io
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, TextIO

from .errors import ReportError

_MODE_PREFIX: Final[str] = "mode: "
_BLOCK_RE: Final[re.Pattern[str]] = re.compile(
    r"^(.+):([0-9]+)\.([0-9]+),([0-9]+)\.([0-9]+) ([0-9]+) ([0-9]+)$"
)


class CoverMode(str, enum.Enum):
    SET = "set"
    COUNT = "count"
    ATOMIC = "atomic"


@dataclass(slots=True)
class Block:
    """One instrumented range. Mutated in place by the rewriter."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int
    num_stmt: int
    count: int

    @property
    def start(self) -> tuple[int, int]:
        return (self.start_line, self.start_col)

    @property
    def end(self) -> tuple[int, int]:
        return (self.end_line, self.end_col)

    def mark_covered(self) -> bool:
        """Raise a zero count to 1. Returns True if the block changed."""
        if self.count == 0:
            self.count = 1
            return True
        return False

    def describe(self) -> str:
        return f"[{self.start_line}.{self.start_col}] => [{self.end_line}.{self.end_col}]"


@dataclass(slots=True)
class FileProfile:
    file_name: str
    blocks: list[Block] = field(default_factory=list)


@dataclass(slots=True)
class CoverageReport:
    mode: CoverMode
    files: list[FileProfile] = field(default_factory=list)


def parse_report(text: str) -> CoverageReport:
    """
    Parse profile text.

    File entries are grouped by name in order of first appearance; blocks keep
    their input order. Blank lines are skipped.
    """
    mode: CoverMode | None = None
    by_name: dict[str, FileProfile] = {}
    files: list[FileProfile] = []

    for lineno, raw in enumerate(text.split("\n"), start=1):
        line = raw.rstrip("\r")
        if not line.strip():
            continue

        if mode is None:
            if not line.startswith(_MODE_PREFIX):
                raise ReportError(f"line {lineno}: expected 'mode: ' header, got {line!r}")
            name = line.removeprefix(_MODE_PREFIX).strip()
            try:
                mode = CoverMode(name)
            except ValueError as e:
                raise ReportError(f"line {lineno}: unknown coverage mode {name!r}") from e
            continue

        m = _BLOCK_RE.match(line)
        if m is None:
            raise ReportError(f"line {lineno}: {line!r} doesn't match expected format")

        file_name = m.group(1)
        profile = by_name.get(file_name)
        if profile is None:
            profile = FileProfile(file_name=file_name)
            by_name[file_name] = profile
            files.append(profile)

        profile.blocks.append(
            Block(
                start_line=int(m.group(2)),
                start_col=int(m.group(3)),
                end_line=int(m.group(4)),
                end_col=int(m.group(5)),
                num_stmt=int(m.group(6)),
                count=int(m.group(7)),
            )
        )

    if mode is None:
        raise ReportError("empty coverage profile (no 'mode: ' header)")

    return CoverageReport(mode=mode, files=files)


def read_report(path: Path) -> CoverageReport:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ReportError(f"cannot read coverage file {path}: {e}") from e
    return parse_report(text)


def _format_block(file_name: str, b: Block) -> str:
    return (
        f"{file_name}:{b.start_line}.{b.start_col},{b.end_line}.{b.end_col}"
        f" {b.num_stmt} {b.count}"
    )


def write_report(report: CoverageReport, out: TextIO) -> None:
    out.write(f"{_MODE_PREFIX}{report.mode.value}\n")
    for profile in report.files:
        for b in profile.blocks:
            out.write(_format_block(profile.file_name, b) + "\n")


def dump_report(report: CoverageReport) -> str:
    buf = io.StringIO()
    write_report(report, buf)
    return buf.getvalue()


def merge_duplicate_blocks(report: CoverageReport) -> int:
    """
    Merge blocks that share the same range within a file.

    Counts are OR-ed in `set` mode and summed otherwise, matching how the Go
    toolchain merges profiles from `-coverpkg` runs. Returns the number of
    blocks removed.
    """
    removed = 0
    for profile in report.files:
        seen: dict[tuple[int, int, int, int], Block] = {}
        kept: list[Block] = []
        for b in profile.blocks:
            key = (b.start_line, b.start_col, b.end_line, b.end_col)
            prev = seen.get(key)
            if prev is None:
                seen[key] = b
                kept.append(b)
                continue

            if prev.num_stmt != b.num_stmt:
                raise ReportError(
                    f"inconsistent NumStmt for {profile.file_name}{b.describe()}: "
                    f"changed from {prev.num_stmt} to {b.num_stmt}"
                )
            if report.mode is CoverMode.SET:
                prev.count |= b.count
            else:
                prev.count += b.count
            removed += 1
        profile.blocks = kept
    return removed
