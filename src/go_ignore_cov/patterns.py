from __future__ import annotations

import os
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from wcmatch import glob

from .errors import PatternError

# Whole-path matching: `**` spans zero or more directories, `{a,b}` alternates,
# `*` may match a leading dot, and `/` is the only separator on every platform.
GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.DOTGLOB | glob.FORCEUNIX


@dataclass(frozen=True, slots=True)
class GlobPattern:
    """A user glob matched against the whole candidate path."""

    pattern: str

    @classmethod
    def compile(cls, pattern: str) -> GlobPattern:
        # Translating up front surfaces brace-expansion and syntax errors at build time.
        try:
            glob.translate(pattern, flags=GLOB_FLAGS)
        except ValueError as e:
            raise PatternError(pattern, str(e), kind="glob") from e
        return cls(pattern=pattern)

    def matches(self, path: str) -> bool:
        return glob.globmatch(path, self.pattern, flags=GLOB_FLAGS)


@dataclass(frozen=True, slots=True)
class PatternSet:
    """
    Compiled exclusion rules.

    Globs are always tried before regexes, whatever order the flags came in:
      1. each glob against the root-relative path, then the absolute path
      2. each regex against the absolute path, then the root-relative path
    """

    globs: tuple[GlobPattern, ...]
    regexes: tuple[re.Pattern[str], ...]
    root: str

    def __len__(self) -> int:
        return len(self.globs) + len(self.regexes)

    def relative(self, absolute_path: str) -> str:
        try:
            return os.path.relpath(absolute_path, self.root)
        except ValueError:
            return absolute_path

    def match(self, absolute_path: str) -> str | None:
        """Return a description of the first rule matching `absolute_path`, or None."""
        rel_path = self.relative(absolute_path)

        for glob in self.globs:
            if glob.matches(rel_path) or glob.matches(absolute_path):
                return f"glob pattern '{glob.pattern}'"

        for regex in self.regexes:
            if regex.search(absolute_path) or regex.search(rel_path):
                return f"regex pattern '{regex.pattern}'"

        return None


def build_pattern_set(
    glob_patterns: Sequence[str],
    regex_patterns: Sequence[str],
    root: Path,
) -> PatternSet:
    """
    Compile exclusion patterns.

    Entries are trimmed and blanks dropped. Regexes compile eagerly, so an
    invalid one fails here with the pattern named.
    """
    globs = tuple(GlobPattern.compile(p.strip()) for p in glob_patterns if p.strip())

    regexes: list[re.Pattern[str]] = []
    for raw in regex_patterns:
        p = raw.strip()
        if not p:
            continue
        try:
            regexes.append(re.compile(p))
        except re.error as e:
            raise PatternError(p, str(e)) from e

    return PatternSet(globs=globs, regexes=tuple(regexes), root=str(root.resolve()))
