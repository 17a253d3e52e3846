"""
Source tree scan for ignore comments.

The walk enumerates every source file first, then a fixed pool of scanner
threads reads and scans them. Each worker returns an immutable record (or
None); the pool's ordered result stream is the only point where results meet.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from .errors import CollectError
from .instructions import Instruction
from .scanner import MARKER_BYTES, decode_source, scan_text
from .ui import RunUI


@dataclass(frozen=True, slots=True)
class SourceFileIgnores:
    """Instructions found in one source file (absolute path)."""

    file_path: str
    instructions: tuple[Instruction, ...]


def walk_source_files(root: Path, *, suffix: str = ".go") -> list[str]:
    """Return all files under `root` ending in `suffix`, in lexical walk order."""

    def on_error(err: OSError) -> None:
        raise CollectError(f"cannot walk source tree at {err.filename}: {err}") from err

    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        for name in sorted(filenames):
            if name.endswith(suffix):
                found.append(os.path.join(dirpath, name))
    return found


def scan_source_file(
    path: str, *, warn: Callable[[str], None] | None = None
) -> SourceFileIgnores | None:
    """
    Scan one file for the worker pool.

    Unreadable files are skipped (reported through `warn`); an unknown
    instruction keyword propagates and aborts the run.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        if warn is not None:
            warn(f"skipping {path}: {e}")
        return None

    # Cheap pre-check; files without the marker cannot yield instructions.
    if MARKER_BYTES not in data:
        return None

    instructions = scan_text(decode_source(data), path)
    if not instructions:
        return None
    return SourceFileIgnores(file_path=path, instructions=tuple(instructions))


def collect_ignores(
    root: Path,
    *,
    workers: int | None = None,
    suffix: str = ".go",
    ui: RunUI | None = None,
) -> dict[str, SourceFileIgnores]:
    """
    Scan every source file under `root`; map absolute path -> its ignores.

    Only files with at least one instruction appear in the result.
    """
    root = root.resolve()
    log = ui.debug if ui is not None else None
    warn = ui.warn if ui is not None else None

    files = walk_source_files(root, suffix=suffix)
    if log is not None:
        log(f"File tree walk found {len(files)} {suffix} files")

    n_workers = workers if workers is not None else (os.cpu_count() or 1)
    results: dict[str, SourceFileIgnores] = {}
    if files:
        with ThreadPoolExecutor(max_workers=n_workers, thread_name_prefix="ignore-scan") as pool:
            for rec in pool.map(lambda p: scan_source_file(p, warn=warn), files):
                if rec is not None:
                    results[rec.file_path] = rec

    if log is not None:
        log(f"Source file processing found {len(results)} files with ignore comments")
    return results
