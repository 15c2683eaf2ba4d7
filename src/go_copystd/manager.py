"""
Copy management functionality.

This module provides the CopyManager class which orchestrates the entire
copy process for each requested root package: resolving it, expanding its
restricted closure, mapping destinations and rewriting the files.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable
from pathlib import Path

from .closure import ClosureExpander
from .config import CopyConfig
from .errors import FormatError
from .formatter import GoImportsFormatter
from .mapper import PathMapper
from .resolver import PackageResolver
from .rewriter import FileRewriter, SourceFormatter
from .types import PackageDescriptor, PackageOutcome, PackageState


class CopyManager:
    """
    Manages copying restricted packages into a public module.

    This is the main class for using the package. Roots are processed one
    after another; the first error aborts the run.

    Attributes:
        config: Settings of the run
        resolver: PackageResolver used for all queries
        mapper: PathMapper built from the config
        expander: ClosureExpander computing each root's closure
        rewriter: FileRewriter writing the destination files
        outcomes: Outcomes of every package processed so far, including a failed one
    """

    def __init__(
        self,
        config: CopyConfig,
        resolver: PackageResolver | None = None,
        formatter: SourceFormatter | None = None,
    ) -> None:
        """
        Initialize the copy manager.

        Args:
            config: Settings of the run
            resolver: Resolver to use (default: `go list` in config.src_root)
            formatter: Formatter to use (default: goimports with the module as local prefix)

        Raises:
            ValueError: If the source root does not exist or is not a directory
        """
        self.config = config

        if not config.src_root.exists():
            raise ValueError(f"Source directory not found: {config.src_root}")
        if not config.src_root.is_dir():
            raise ValueError(f"Source path is not a directory: {config.src_root}")

        self.resolver = resolver or PackageResolver(config.src_root, go_command=config.go_command)
        self.formatter = formatter or GoImportsFormatter(
            config.module, command=config.goimports_command
        )
        self.mapper = PathMapper(
            config.module,
            config.src_root,
            config.dst_root,
            rules=config.rules,
            restricted_prefixes=config.restricted_prefixes,
        )
        self.expander = ClosureExpander(self.resolver, self.mapper)
        self.rewriter = FileRewriter(
            self.mapper,
            self.formatter,
            skip_files=config.skip_files,
            overwrite=config.overwrite,
        )
        self.outcomes: list[PackageOutcome] = []

    def analyze(self, roots: Iterable[str]) -> dict[str, Path | None]:
        """
        Compute closures and destinations without writing anything.

        Args:
            roots: Root package queries

        Returns:
            Mapping from import path to destination directory (None if unmapped)
        """
        destinations: dict[str, Path | None] = {}
        for root in roots:
            for import_path, pkg in self.expander.expand(root).items():
                destinations.setdefault(import_path, self.mapper.map_destination(pkg.dir))
        return destinations

    def run(self, roots: Iterable[str]) -> list[PackageOutcome]:
        """
        Copy every requested root package and its restricted closure.

        Args:
            roots: Root package queries (e.g., ["internal/poll", "cmd/internal/obj"])

        Returns:
            Outcomes of all packages touched, in processing order

        Raises:
            CopyStdError: On resolver or formatting failures
            OSError: On filesystem failures
        """
        if isinstance(self.formatter, GoImportsFormatter) and not self.formatter.is_installed():
            raise FormatError(self.formatter.missing_message())

        outcomes: list[PackageOutcome] = []
        for root in roots:
            outcomes.extend(self.copy_package(root))
        return outcomes

    def copy_package(self, root: str) -> list[PackageOutcome]:
        """
        Copy one root package and its restricted closure.

        Args:
            root: Root package query

        Returns:
            Outcome of every package in the closure

        Raises:
            CopyStdError: On resolver or formatting failures
            OSError: On filesystem failures
        """
        print(f"Resolving {root}...")
        closure = self.expander.expand(root)
        print(f"Found {len(closure)} restricted packages for {root}")

        start = len(self.outcomes)
        for pkg in closure.values():
            self._copy_one(pkg)
        return self.outcomes[start:]

    def _copy_one(self, pkg: PackageDescriptor) -> PackageOutcome:
        outcome = PackageOutcome(pkg.import_path, PackageState.EXPANDED)
        self.outcomes.append(outcome)
        target_dir = self.mapper.map_destination(pkg.dir)
        outcome.target_dir = target_dir

        if target_dir is None:
            outcome.state = PackageState.SKIPPED
            outcome.reason = "no rewrite rule matches its location"
            print(f"Warning: Skipping {pkg.import_path}: {outcome.reason}", file=sys.stderr)
            return outcome

        try:
            results = self.rewriter.rewrite_package(pkg)
        except Exception as e:
            outcome.state = PackageState.FAILED
            outcome.reason = str(e)
            print(f"Error copying {pkg.import_path} to {target_dir}", file=sys.stderr)
            raise

        if results is None:
            outcome.state = PackageState.SKIPPED
            outcome.reason = "destination already exists"
            print(f"Skipping {pkg.import_path}: {target_dir} already exists")
            return outcome

        outcome.state = PackageState.REWRITTEN
        outcome.results = results
        print(
            f"Copied {pkg.import_path} -> {target_dir} "
            f"({len(outcome.written_files)} of {len(results)} files written)"
        )
        return outcome
