"""
Ignore instructions and how each one rewrites a file's blocks.

- IgnoreBlock: mark blocks whose [start, end) range holds the anchor position.
- IgnoreFile: mark every block of the file (from a `//coverage:ignore file` comment).
- PatternIgnore: same effect as IgnoreFile, but from an exclusion pattern.
- IgnoreEmpty: mark blocks with no statements (`--ignore-empty`).

Every variant only raises zero counts to 1; statement counts never change.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, Union

from .report import Block, FileProfile

Log = Callable[[str], None]


class Instruction(Protocol):
    def apply(self, profile: FileProfile, log: Log | None = None) -> int:
        """Mark matching blocks covered; return the number of blocks changed."""
        ...


@dataclass(frozen=True, slots=True)
class IgnoreBlock:
    line: int
    col: int

    @property
    def position(self) -> tuple[int, int]:
        return (self.line, self.col)

    def contains(self, block: Block) -> bool:
        # (line, col) tuples order like a line*100000+col encoding
        # without its 99,999 column ceiling.
        return block.start <= self.position < block.end

    def apply(self, profile: FileProfile, log: Log | None = None) -> int:
        changed = 0
        for block in profile.blocks:
            if not self.contains(block):
                continue
            if block.mark_covered():
                changed += 1
                if log is not None:
                    log(
                        f"Setting coverage block {block.describe()} count to 1 "
                        f"for {profile.file_name}"
                    )
        return changed


def _mark_all(profile: FileProfile) -> int:
    changed = 0
    for block in profile.blocks:
        if block.mark_covered():
            changed += 1
    return changed


@dataclass(frozen=True, slots=True)
class IgnoreFile:
    def apply(self, profile: FileProfile, log: Log | None = None) -> int:
        changed = _mark_all(profile)
        if log is not None:
            log(f"Setting coverage blocks [all] count to 1 for {profile.file_name}")
        return changed


@dataclass(frozen=True, slots=True)
class PatternIgnore:
    matched_by: str

    def apply(self, profile: FileProfile, log: Log | None = None) -> int:
        changed = _mark_all(profile)
        if log is not None:
            log(
                f"Setting coverage blocks [all] count to 1 for {profile.file_name} "
                f"(matched by {self.matched_by})"
            )
        return changed


@dataclass(frozen=True, slots=True)
class IgnoreEmpty:
    def apply(self, profile: FileProfile, log: Log | None = None) -> int:
        changed = 0
        for block in profile.blocks:
            if block.num_stmt != 0:
                continue
            if block.mark_covered():
                changed += 1
                if log is not None:
                    log(
                        f"Setting empty coverage block {block.describe()} count to 1 "
                        f"for {profile.file_name}"
                    )
        return changed


SourceInstruction = Union[IgnoreBlock, IgnoreFile]
