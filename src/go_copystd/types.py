"""
Type definitions for the package.

This module contains the core data structures used throughout the package
for representing resolved Go packages, path rewrite rules and the results
of copying files into the destination module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class PackageError:
    """
    A per-package load error reported inline by `go list -e`.

    Attributes:
        err: The error message itself
        pos: Position of the error (file:line:col), if reported
        import_stack: Shortest import path from the queried package to this one
    """

    err: str
    pos: str = ""
    import_stack: tuple[str, ...] = ()

    @classmethod
    def from_json(cls, data: dict[str, Any] | None) -> PackageError | None:
        if not data:
            return None
        return cls(
            err=data.get("Err", ""),
            pos=data.get("Pos", ""),
            import_stack=tuple(data.get("ImportStack") or ()),
        )


@dataclass(frozen=True)
class PackageDescriptor:
    """
    One importable Go package as reported by the package resolver.

    Descriptors are created fresh for every resolver query and never mutated.

    Attributes:
        dir: Absolute directory holding the package sources ("" if unknown)
        import_path: Import path of the package (e.g., "internal/bytealg")
        name: Package name from the package clause
        imports: Direct import paths of the package, in the order reported
        go_files: Regular .go source files
        test_go_files: _test.go files in the package itself
        x_test_go_files: _test.go files of the external test package
        ignored_go_files: .go files excluded by build constraints
        standard: Whether the package is part of the standard library
        incomplete: Whether this package or one of its dependencies has an error
        error: Load error for this package, if any
        deps_errors: Load errors of dependencies
    """

    dir: str
    import_path: str
    name: str = ""
    imports: tuple[str, ...] = ()
    go_files: tuple[str, ...] = ()
    test_go_files: tuple[str, ...] = ()
    x_test_go_files: tuple[str, ...] = ()
    ignored_go_files: tuple[str, ...] = ()
    standard: bool = False
    incomplete: bool = False
    error: PackageError | None = None
    deps_errors: tuple[PackageError, ...] = ()

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> PackageDescriptor:
        """
        Build a descriptor from one `go list -json` record.

        Unknown keys are ignored and missing lists default to empty.

        Args:
            data: Decoded JSON object for a single package

        Returns:
            The corresponding PackageDescriptor
        """
        deps_errors = tuple(
            err for err in (PackageError.from_json(e) for e in data.get("DepsErrors") or ()) if err
        )
        return cls(
            dir=data.get("Dir", ""),
            import_path=data.get("ImportPath", ""),
            name=data.get("Name", ""),
            imports=tuple(data.get("Imports") or ()),
            go_files=tuple(data.get("GoFiles") or ()),
            test_go_files=tuple(data.get("TestGoFiles") or ()),
            x_test_go_files=tuple(data.get("XTestGoFiles") or ()),
            ignored_go_files=tuple(data.get("IgnoredGoFiles") or ()),
            standard=bool(data.get("Standard", False)),
            incomplete=bool(data.get("Incomplete", False)),
            error=PackageError.from_json(data.get("Error")),
            deps_errors=deps_errors,
        )

    @property
    def path(self) -> Path:
        return Path(self.dir)

    def exists(self) -> bool:
        """Return True if the package directory is known and present on disk."""
        return bool(self.dir) and self.path.is_dir()


@dataclass(frozen=True)
class RewriteRule:
    """
    A single prefix substitution from a restricted subtree to a public one.

    Attributes:
        restricted: Import path prefix of the restricted subtree (e.g., "cmd/go/internal")
        public: Path below the destination module it maps to ("" for the module root)
    """

    restricted: str
    public: str = ""


@dataclass
class RewriteResult:
    """
    Outcome of rewriting one source file.

    Attributes:
        source_path: File that was read
        target_path: File in the destination tree
        content: Formatted content for the destination file
        written: False if the destination already held identical content
    """

    source_path: Path
    target_path: Path
    content: bytes
    written: bool = True


class PackageState(Enum):
    """
    States a package goes through while being copied.

    An outcome starts at EXPANDED, once the package is a closure member, and
    ends at REWRITTEN, SKIPPED or FAILED. There is no resolved state: a
    resolution failure raises before any outcome exists.
    """

    EXPANDED = "expanded"
    REWRITTEN = "rewritten"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class PackageOutcome:
    """
    Report of what happened to one package of a closure.

    Attributes:
        import_path: Import path of the source package
        state: Final state reached
        target_dir: Destination directory, or None if the package has no mapping
        results: Per-file rewrite results (empty unless REWRITTEN)
        reason: Human readable reason for SKIPPED or FAILED
    """

    import_path: str
    state: PackageState
    target_dir: Path | None = None
    results: list[RewriteResult] = field(default_factory=list)
    reason: str = ""

    @property
    def written_files(self) -> list[Path]:
        return [r.target_path for r in self.results if r.written]
