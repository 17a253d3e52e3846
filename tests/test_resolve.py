from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from go_ignore_cov.errors import ResolveError
from go_ignore_cov.report import parse_report
from go_ignore_cov.resolve import (
    ChainResolver,
    GoListResolver,
    LocalDirResolver,
    ModuleResolver,
    build_package_cache,
    read_module_path,
    resolve_file,
)
from go_ignore_cov.ui import RunUI


class _RecordingResolver:
    def __init__(self, answers: dict[str, str]) -> None:
        self.answers = answers
        self.calls: list[str] = []

    def resolve(self, import_dir: str) -> str:
        self.calls.append(import_dir)
        try:
            return self.answers[import_dir]
        except KeyError:
            raise ResolveError(f"unknown package {import_dir}") from None


class _RecordingUI(RunUI):
    def __init__(self) -> None:
        super().__init__(verbose=True, color="never")
        self.warnings: list[str] = []

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def debug(self, message: str) -> None:
        pass


def test_read_module_path(tmp_path: Path) -> None:
    (tmp_path / "go.mod").write_text("// comment\nmodule example.com/m\n\ngo 1.21\n", encoding="utf-8")
    assert read_module_path(tmp_path / "go.mod") == "example.com/m"
    assert read_module_path(tmp_path / "missing.mod") is None


def test_module_resolver_maps_subpackages(tmp_path: Path) -> None:
    (tmp_path / "go.mod").write_text("module example.com/m\n", encoding="utf-8")
    r = ModuleResolver(tmp_path)
    assert r.resolve("example.com/m") == str(tmp_path)
    assert r.resolve("example.com/m/a/b") == os.path.join(tmp_path, "a", "b")
    with pytest.raises(ResolveError):
        r.resolve("example.com/mother")
    with pytest.raises(ResolveError):
        r.resolve("github.com/x/y")


def test_module_resolver_without_go_mod(tmp_path: Path) -> None:
    with pytest.raises(ResolveError):
        ModuleResolver(tmp_path).resolve("example.com/m")


def test_local_dir_resolver(tmp_path: Path) -> None:
    r = LocalDirResolver(tmp_path)
    assert r.resolve("./pkg") == os.path.join(tmp_path, "pkg")
    assert r.resolve(".") == os.path.normpath(str(tmp_path))
    assert r.resolve("/abs/dir") == "/abs/dir"
    with pytest.raises(ResolveError):
        r.resolve("example.com/m")


def test_chain_resolver_falls_through() -> None:
    first = _RecordingResolver({})
    second = _RecordingResolver({"example.com/m/a": "/src/a"})
    chain = ChainResolver([first, second])
    assert chain.resolve("example.com/m/a") == "/src/a"
    assert first.calls == ["example.com/m/a"]

    with pytest.raises(ResolveError) as exc:
        chain.resolve("example.com/m/b")
    assert "example.com/m/b" in str(exc.value)


def test_package_cache_resolves_each_directory_once() -> None:
    report = parse_report(
        "mode: set\n"
        "example.com/m/a/x.go:1.1,2.1 1 0\n"
        "example.com/m/a/y.go:1.1,2.1 1 0\n"
        "example.com/m/b/z.go:1.1,2.1 1 0\n"
        "example.com/m/a/x.go:3.1,4.1 1 0\n"
    )
    resolver = _RecordingResolver({"example.com/m/a": "/src/a", "example.com/m/b": "/src/b"})
    cache = build_package_cache(report, resolver)
    assert resolver.calls == ["example.com/m/a", "example.com/m/b"]
    assert cache == {"example.com/m/a": "/src/a", "example.com/m/b": "/src/b"}


def test_package_cache_keeps_unresolved_directory() -> None:
    report = parse_report("mode: set\nother.org/x/f.go:1.1,2.1 1 0\n")
    ui = _RecordingUI()
    cache = build_package_cache(report, _RecordingResolver({}), ui=ui)
    assert cache == {"other.org/x": "other.org/x"}
    assert resolve_file("other.org/x/f.go", cache) == "other.org/x/f.go"
    assert len(ui.warnings) == 1
    assert ui.warnings[0].startswith("Could not resolve package other.org/x, using original path")


def test_resolve_file_joins_directory_and_base() -> None:
    cache = {"example.com/m/a": "/src/a"}
    assert resolve_file("example.com/m/a/x.go", cache) == os.path.join("/src/a", "x.go")
    assert resolve_file("example.com/m/zz/x.go", cache) == "example.com/m/zz/x.go"


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
def test_go_list_failure_is_a_resolve_error(tmp_path: Path) -> None:
    (tmp_path / "fake-go").write_text("#!/bin/sh\necho 'no such package' >&2\nexit 1\n", encoding="utf-8")
    (tmp_path / "fake-go").chmod(0o755)
    with pytest.raises(ResolveError) as exc:
        GoListResolver(tmp_path, str(tmp_path / "fake-go")).resolve("example.com/m/a")
    assert "go list failed for example.com/m/a" in str(exc.value)


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
def test_go_list_first_output_line_wins(tmp_path: Path) -> None:
    (tmp_path / "fake-go").write_text(f"#!/bin/sh\necho {tmp_path}/a\n", encoding="utf-8")
    (tmp_path / "fake-go").chmod(0o755)
    assert GoListResolver(tmp_path, str(tmp_path / "fake-go")).resolve("example.com/m/a") == f"{tmp_path}/a"
