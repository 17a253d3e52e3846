"""
go-ignore-cov (Python)

Rewrites a Go coverage profile so that code excluded by `//coverage:ignore`
comments or by path patterns reads as covered.

Public API surface is intentionally small; prefer using the CLI entrypoint.
"""

from __future__ import annotations

__all__ = [
    "__version__",
]

# Keep in sync with pyproject.toml.
__version__ = "0.5.0"
