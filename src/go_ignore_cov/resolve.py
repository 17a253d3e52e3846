"""
Map profile file names (import-path style) to absolute source paths.

A profile names files like `example.com/mod/pkg/file.go`. Each distinct
directory is resolved once through a `PackageResolver`; every later lookup is
a dict read.
"""

from __future__ import annotations

import os
import posixpath
import re
import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import Final, Protocol

from .errors import ResolveError
from .exec import ExecError, run_checked
from .report import CoverageReport
from .ui import RunUI

_MODULE_RE: Final[re.Pattern[str]] = re.compile(r'^\s*module\s+"?([^"\s]+)"?', re.MULTILINE)


class PackageResolver(Protocol):
    def resolve(self, import_dir: str) -> str:
        """Return the absolute directory for `import_dir` or raise ResolveError."""
        ...


class LocalDirResolver:
    """Absolute directories resolve to themselves; `./x` and `../x` resolve under root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def resolve(self, import_dir: str) -> str:
        if os.path.isabs(import_dir):
            return import_dir
        if import_dir == "." or import_dir.startswith(("./", "../")):
            return os.path.normpath(os.path.join(self.root, import_dir))
        raise ResolveError(f"{import_dir} is not a local directory")


class ModuleResolver:
    """Resolve import paths under the module declared in `<root>/go.mod`."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.module = read_module_path(root / "go.mod")

    def resolve(self, import_dir: str) -> str:
        if self.module is None:
            raise ResolveError(f"no go.mod module under {self.root}")
        if import_dir == self.module:
            return str(self.root)
        prefix = self.module + "/"
        if import_dir.startswith(prefix):
            rest = import_dir.removeprefix(prefix)
            return os.path.join(self.root, *rest.split("/"))
        raise ResolveError(f"{import_dir} is outside module {self.module}")


class GoListResolver:
    """Ask the Go toolchain (`go list -find`) where a package lives."""

    def __init__(self, root: Path, go_bin: str = "go") -> None:
        self.root = root
        self.go_bin = go_bin

    def resolve(self, import_dir: str) -> str:
        argv = [self.go_bin, "list", "-find", "-f", "{{.Dir}}", import_dir]
        try:
            res = run_checked(argv, cwd=self.root)
        except ExecError as e:
            raise ResolveError(f"go list failed for {import_dir}: {e}") from e
        out = res.stdout.strip()
        if not out:
            raise ResolveError(f"go list returned no directory for {import_dir}")
        return out.splitlines()[0].strip()


class ChainResolver:
    """Try resolvers in order; the first success wins."""

    def __init__(self, resolvers: Sequence[PackageResolver]) -> None:
        self.resolvers = tuple(resolvers)

    def resolve(self, import_dir: str) -> str:
        errors: list[str] = []
        for r in self.resolvers:
            try:
                return r.resolve(import_dir)
            except ResolveError as e:
                errors.append(str(e))
        raise ResolveError(f"could not resolve package {import_dir}: " + "; ".join(errors))


def read_module_path(go_mod: Path) -> str | None:
    try:
        text = go_mod.read_text(encoding="utf-8")
    except OSError:
        return None
    m = _MODULE_RE.search(text)
    return m.group(1) if m is not None else None


def default_resolver(root: Path) -> PackageResolver:
    resolvers: list[PackageResolver] = [LocalDirResolver(root), ModuleResolver(root)]
    go_bin = shutil.which("go")
    if go_bin is not None:
        resolvers.append(GoListResolver(root, go_bin))
    return ChainResolver(resolvers)


def split_file_name(file_name: str) -> tuple[str, str]:
    return posixpath.split(file_name)


def build_package_cache(
    report: CoverageReport,
    resolver: PackageResolver,
    *,
    ui: RunUI | None = None,
) -> dict[str, str]:
    """
    Resolve every distinct directory of the report exactly once.

    A directory that fails to resolve maps to itself, so pattern rules can
    still match the unresolved path.
    """
    cache: dict[str, str] = {}
    for profile in report.files:
        import_dir, _ = split_file_name(profile.file_name)
        if import_dir in cache:
            continue
        try:
            cache[import_dir] = resolver.resolve(import_dir)
        except ResolveError as e:
            if ui is not None:
                ui.warn(f"Could not resolve package {import_dir}, using original path ({e})")
            cache[import_dir] = import_dir

    if ui is not None:
        ui.debug(f"Package cache built for {len(cache)} unique directories")
    return cache


def resolve_file(file_name: str, cache: dict[str, str]) -> str:
    import_dir, base = split_file_name(file_name)
    pkg_dir = cache.get(import_dir)
    if pkg_dir is None:
        return file_name
    return os.path.join(pkg_dir, base)
