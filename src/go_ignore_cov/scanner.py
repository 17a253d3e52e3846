from __future__ import annotations

import re
from pathlib import Path
from typing import Final

from .errors import UnexpectedInstructionError
from .instructions import IgnoreBlock, IgnoreFile, SourceInstruction

MARKER: Final[str] = "coverage:ignore"
MARKER_BYTES: Final[bytes] = MARKER.encode("ascii")

INSTRUCTION_FILE: Final[str] = "file"

_IGNORE_RE: Final[re.Pattern[str]] = re.compile(
    r"//\s?coverage:ignore(\s([a-z]+))?$", re.ASCII
)
_COMMENT_MARKERS: Final[tuple[str, ...]] = ("//coverage:ignore", "// coverage:ignore")


def instruction_from_line(line: str) -> str | None:
    """
    Return the keyword carried by an ignore comment on `line`, or None.

    A bare `//coverage:ignore` yields "" (block scope). Keywords are returned
    as written; validating them is up to the caller.
    """
    if not any(marker in line for marker in _COMMENT_MARKERS):
        return None
    m = _IGNORE_RE.search(line)
    if m is None:
        return None
    return m.group(2) or ""


def _indent_col(line: str) -> int:
    return len(line) - len(line.lstrip("\t ")) + 1


def _split_lines(text: str) -> list[str]:
    # Split on "\n" only and drop a trailing "\r", so line numbers agree with
    # the Go toolchain even for files holding form feeds or other separators.
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


def scan_text(text: str, path: str) -> list[SourceInstruction]:
    """
    Extract ignore instructions from source text.

    A block comment anchors to the start of the *next* line (column after its
    indentation), which is where the tagged statement's block begins. The
    pending anchor resolves on the next line even if that line carries its own
    ignore comment. A block comment on the last line has nothing to anchor to
    and is dropped.
    """
    instructions: list[SourceInstruction] = []
    pending_block = False

    for lineno, line in enumerate(_split_lines(text), start=1):
        if pending_block:
            instructions.append(IgnoreBlock(line=lineno, col=_indent_col(line)))
            pending_block = False

        keyword = instruction_from_line(line)
        if keyword is None:
            continue
        if keyword == "":
            pending_block = True
        elif keyword == INSTRUCTION_FILE:
            instructions.append(IgnoreFile())
        else:
            raise UnexpectedInstructionError(keyword, lineno, path)

    return instructions


def decode_source(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def scan_file(path: Path) -> list[SourceInstruction]:
    """Read `path` and extract its ignore instructions. OSError propagates."""
    return scan_text(decode_source(path.read_bytes()), str(path))
