from __future__ import annotations


class IgnoreCovError(RuntimeError):
    """Base class for fatal run errors."""


class ConfigError(ValueError):
    """Raised when CLI/env configuration values are invalid."""


class PatternError(ConfigError):
    """Raised when an exclusion pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str, *, kind: str = "regex") -> None:
        super().__init__(f"invalid {kind} pattern '{pattern}': {reason}")
        self.pattern = pattern
        self.kind = kind


class ReportError(IgnoreCovError):
    """Raised when a coverage profile cannot be parsed."""


class UnexpectedInstructionError(IgnoreCovError):
    """Raised for a `coverage:ignore` comment with an unknown keyword."""

    def __init__(self, keyword: str, line: int, path: str) -> None:
        super().__init__(
            f"Unexpected ignore instruction [{keyword}] at line {line} in file [{path}]"
        )
        self.keyword = keyword
        self.line = line
        self.path = path


class CollectError(IgnoreCovError):
    """Raised when the source tree cannot be walked."""


class ResolveError(IgnoreCovError):
    """Raised when a package directory cannot be resolved (recoverable)."""


class OutputError(IgnoreCovError):
    """Raised when the rewritten profile cannot be written."""
