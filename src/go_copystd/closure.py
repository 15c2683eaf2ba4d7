"""
Closure expansion functionality.

This module provides the ClosureExpander class which computes the set of
restricted packages that must be copied together with a requested root so
the copy compiles on its own.
"""

from __future__ import annotations

import sys
from collections import deque

from .mapper import PathMapper
from .resolver import PackageResolver
from .types import PackageDescriptor


class ClosureExpander:
    """
    Expands a root package into its restricted dependency closure.

    Only import edges classified as restricted by the mapper are followed.
    Everything else is expected to be imported unmodified by the copied code.

    Attributes:
        resolver: PackageResolver used for every query
        mapper: PathMapper providing the restricted-path predicate
    """

    def __init__(self, resolver: PackageResolver, mapper: PathMapper) -> None:
        self.resolver = resolver
        self.mapper = mapper

    def expand(self, root_query: str) -> dict[str, PackageDescriptor]:
        """
        Compute the closure of a root query.

        Process:
        1. Resolves the root query
        2. Adds every descriptor whose directory exists on disk
        3. Resolves restricted imports not seen yet and repeats
        4. Re-resolves every member by directory to get final descriptors

        Args:
            root_query: Import path or pattern of the root package(s)

        Returns:
            Mapping from import path to descriptor, in discovery order

        Raises:
            ResolverError: If any resolver query fails
        """
        closure: dict[str, PackageDescriptor] = {}
        seen_imports: set[str] = set()
        seen_dirs: set[str] = set()
        ignored: set[str] = set()

        queue: deque[PackageDescriptor] = deque(self.resolver.resolve(root_query))

        while queue:
            pkg = queue.popleft()
            if pkg.import_path in closure:
                continue
            seen_imports.add(pkg.import_path)

            if not pkg.exists():
                self._warn_missing(pkg)
                continue
            if pkg.dir in seen_dirs:
                continue

            closure[pkg.import_path] = pkg
            seen_dirs.add(pkg.dir)

            for imp in pkg.imports:
                if not self.mapper.is_restricted(imp):
                    if imp not in ignored:
                        ignored.add(imp)
                        print(f"Ignoring import {imp} (not restricted)")
                    continue
                if imp in seen_imports:
                    continue
                seen_imports.add(imp)
                queue.extend(self.resolver.resolve(imp))

        return self.refresh(closure)

    def refresh(self, closure: dict[str, PackageDescriptor]) -> dict[str, PackageDescriptor]:
        """
        Re-resolve closure members by directory.

        The first pass may come from pattern queries with partial metadata;
        querying each directory directly gives the descriptor the rewriter
        works from.

        Args:
            closure: Mapping produced by the first expansion pass

        Returns:
            New mapping with authoritative descriptors
        """
        refreshed: dict[str, PackageDescriptor] = {}
        for pkg in closure.values():
            for fresh in self.resolver.resolve(pkg.dir):
                if not fresh.exists():
                    self._warn_missing(fresh)
                    continue
                refreshed.setdefault(fresh.import_path, fresh)
        return refreshed

    @staticmethod
    def _warn_missing(pkg: PackageDescriptor) -> None:
        location = pkg.dir or "<no directory>"
        message = f"Warning: {pkg.import_path} source {location} does not exist, skipping"
        if pkg.error is not None and pkg.error.err:
            message += f" ({pkg.error.err})"
        print(message, file=sys.stderr)
