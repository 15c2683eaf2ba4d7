"""Pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from go_copystd import FormatError, PackageDescriptor


class FakeResolver:
    """
    In-memory stand-in for PackageResolver.

    Packages are looked up by import path or by directory, the two kinds of
    query the closure expander issues. Unknown queries return a descriptor
    without a directory, the way `go list -e` reports unresolvable packages.
    """

    def __init__(self, packages: list[PackageDescriptor] | None = None) -> None:
        self.packages: dict[str, PackageDescriptor] = {}
        self.calls: list[tuple[str, ...]] = []
        for pkg in packages or []:
            self.add(pkg)

    def add(self, pkg: PackageDescriptor) -> None:
        self.packages[pkg.import_path] = pkg

    def resolve(self, *patterns: str) -> list[PackageDescriptor]:
        self.calls.append(patterns)
        found: list[PackageDescriptor] = []
        for pattern in patterns:
            match = self.packages.get(pattern)
            if match is None:
                match = next((p for p in self.packages.values() if p.dir == pattern), None)
            if match is None:
                match = PackageDescriptor(dir="", import_path=pattern)
            found.append(match)
        return found


class PassthroughFormatter:
    """Formatter that returns content unchanged and records each call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Path | None]] = []

    def format(self, file_name: str, content: bytes, src_dir: Path | None = None) -> bytes:
        self.calls.append((file_name, src_dir))
        return content


class FailingFormatter:
    """Formatter that rejects every file."""

    def format(self, file_name: str, content: bytes, src_dir: Path | None = None) -> bytes:
        raise FormatError(f"Could not format {file_name}: expected declaration")


def write_package(
    src_root: Path,
    import_path: str,
    files: dict[str, str],
    imports: list[str] | None = None,
    test_files: dict[str, str] | None = None,
    ignored_files: dict[str, str] | None = None,
) -> PackageDescriptor:
    """Create a package directory under src_root and return its descriptor."""
    pkg_dir = src_root / import_path
    pkg_dir.mkdir(parents=True, exist_ok=True)
    for group in (files, test_files or {}, ignored_files or {}):
        for name, body in group.items():
            (pkg_dir / name).write_text(body, encoding="utf-8")

    return PackageDescriptor(
        dir=str(pkg_dir),
        import_path=import_path,
        name=import_path.rsplit("/", 1)[-1],
        imports=tuple(imports or ()),
        go_files=tuple(files),
        test_go_files=tuple(test_files or ()),
        ignored_go_files=tuple(ignored_files or ()),
        standard=True,
    )


@pytest.fixture
def src_root(tmp_path: Path) -> Path:
    """Create an empty fake $GOROOT/src."""
    root = tmp_path / "goroot" / "src"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def dst_root(tmp_path: Path) -> Path:
    """Destination directory for the copied module."""
    root = tmp_path / "dst"
    root.mkdir()
    return root


@pytest.fixture
def foo_bar_packages(src_root: Path) -> list[PackageDescriptor]:
    """internal/foo importing internal/bar and fmt; internal/bar importing only errors."""
    foo = write_package(
        src_root,
        "internal/foo",
        {
            "a.go": 'package foo\n\nimport (\n\t"fmt"\n\t"internal/bar"\n)\n\n'
            "func Hello() { fmt.Println(bar.Name) }\n",
        },
        imports=["fmt", "internal/bar"],
    )
    bar = write_package(
        src_root,
        "internal/bar",
        {"a.go": 'package bar\n\nimport "errors"\n\nvar Name = errors.New("bar").Error()\n'},
        imports=["errors"],
    )
    return [foo, bar]
