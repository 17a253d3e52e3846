from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

DEFAULT_SOURCE_SUFFIX = ".go"


@dataclass(frozen=True, slots=True)
class Config:
    """
    Typed config used by the runner.

    Notes:
    - `output` defaults to overwriting `coverage_file` in place.
    - `root` is both the source tree that is scanned for ignore comments and the
      base that relative glob patterns are evaluated against.
    - `workers=None` means one scanner thread per CPU.
    """

    coverage_file: Path
    root: Path
    output: Path | None = None
    exclude_globs: tuple[str, ...] = ()
    exclude_regex: tuple[str, ...] = ()
    verbose: bool = False
    ignore_empty: bool = False
    merge_duplicates: bool = False
    workers: int | None = None
    source_suffix: str = DEFAULT_SOURCE_SUFFIX

    def output_path(self) -> Path:
        return self.output if self.output is not None else self.coverage_file

    def effective_workers(self) -> int:
        if self.workers is not None:
            return self.workers
        return os.cpu_count() or 1

    def has_patterns(self) -> bool:
        return bool(self.exclude_globs or self.exclude_regex)


def split_patterns(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated pattern list, dropping blank entries."""
    if not raw:
        return ()
    out: list[str] = []
    for part in raw.split(","):
        p = part.strip()
        if p:
            out.append(p)
    return tuple(out)


def validate_config(cfg: Config) -> None:
    """
    Validate a config before any work starts.

    - the input profile must exist
    - the root must be a directory
    - workers, when given, must be positive
    """
    if not cfg.coverage_file.is_file():
        raise ConfigError(f"coverage file not found: {cfg.coverage_file}")
    if not cfg.root.is_dir():
        raise ConfigError(f"module root is not a directory: {cfg.root}")
    if cfg.workers is not None and cfg.workers <= 0:
        raise ConfigError(f"workers must be > 0, got {cfg.workers}.")
    if not cfg.source_suffix:
        raise ConfigError("source suffix must not be empty.")
