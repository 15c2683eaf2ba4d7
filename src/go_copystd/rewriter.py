"""
File rewriting functionality.

This module provides the FileRewriter class which copies the source files of
a resolved package into the destination module, rewriting restricted import
paths on the way and formatting the result.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from .mapper import PathMapper
from .types import PackageDescriptor, RewriteResult
from .utils import content_digest, file_digest, has_files

# zbootstrap.go is generated by the toolchain bootstrap; the destination
# regenerates its own.
DEFAULT_SKIP_FILES: tuple[str, ...] = ("zbootstrap.go",)


class SourceFormatter(Protocol):
    def format(self, file_name: str, content: bytes, src_dir: Path | None = None) -> bytes: ...


class FileRewriter:
    """
    Writes rewritten copies of package sources.

    Attributes:
        mapper: PathMapper giving destinations and import rewrites
        formatter: Formatter applied to every rewritten file
        skip_files: File names never copied
        overwrite: If False, packages whose destination already holds files are skipped
    """

    def __init__(
        self,
        mapper: PathMapper,
        formatter: SourceFormatter,
        skip_files: Iterable[str] = DEFAULT_SKIP_FILES,
        overwrite: bool = False,
    ) -> None:
        self.mapper = mapper
        self.formatter = formatter
        self.skip_files = frozenset(skip_files)
        self.overwrite = overwrite

    def source_files(self, pkg: PackageDescriptor) -> list[str]:
        """
        List the file names of a package that should be copied.

        Regular, in-package test, external test and build-constraint-excluded
        files are all included, in that order, without duplicates.

        Args:
            pkg: Package to list

        Returns:
            File names relative to the package directory
        """
        names: list[str] = []
        for group in (
            pkg.go_files,
            pkg.test_go_files,
            pkg.x_test_go_files,
            pkg.ignored_go_files,
        ):
            for name in group:
                if name in self.skip_files or name in names:
                    continue
                names.append(name)
        return names

    def destination_populated(self, target_dir: Path) -> bool:
        """Return True if target_dir already holds output from an earlier run."""
        return has_files(target_dir)

    def rewrite_package(self, pkg: PackageDescriptor) -> list[RewriteResult] | None:
        """
        Rewrite every source file of a package.

        Args:
            pkg: Package to copy

        Returns:
            Results for each file, or None if the package was skipped because
            it has no destination or its destination is already populated
            (unless overwrite is set)

        Raises:
            FormatError: If a rewritten file cannot be formatted
            OSError: If reading or writing a file fails
        """
        target_dir = self.mapper.map_destination(pkg.dir)
        if target_dir is None:
            return None
        if not self.overwrite and self.destination_populated(target_dir):
            return None

        results: list[RewriteResult] = []
        for name in self.source_files(pkg):
            result = self.rewrite_file(pkg, name)
            if result is not None:
                results.append(result)
        return results

    def rewrite_file(self, pkg: PackageDescriptor, file_name: str) -> RewriteResult | None:
        """
        Rewrite a single source file into the destination module.

        Reads the file, rewrites restricted import literals, creates the
        destination directory, formats the content and writes it. The write is
        skipped if the destination file already has identical content.

        Args:
            pkg: Package the file belongs to
            file_name: File name relative to the package directory

        Returns:
            RewriteResult, or None for skipped file names and unmapped packages

        Raises:
            FormatError: If the rewritten content cannot be formatted
            OSError: If reading or writing fails
        """
        if file_name in self.skip_files:
            return None

        target_dir = self.mapper.map_destination(pkg.dir)
        if target_dir is None:
            return None

        source_path = pkg.path / file_name
        body = source_path.read_bytes().decode("utf-8")
        body = self.mapper.map_import_literal(body)

        target_dir.mkdir(parents=True, exist_ok=True)
        data = self.formatter.format(file_name, body.encode("utf-8"), src_dir=target_dir)

        target_path = target_dir / file_name
        if file_digest(target_path) == content_digest(data):
            return RewriteResult(source_path, target_path, data, written=False)

        target_path.write_bytes(data)
        return RewriteResult(source_path, target_path, data)
