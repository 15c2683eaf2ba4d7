"""
Path mapping functionality.

This module provides the PathMapper class which translates restricted
package locations and import paths into their public counterparts in the
destination module. The same rule table drives both the on-disk destination
and the textual import rewrite, so the copied code resolves its own imports.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from .types import RewriteRule

DEFAULT_RULES: tuple[RewriteRule, ...] = (
    RewriteRule("cmd/asm/internal", "asm"),
    RewriteRule("cmd/compile/internal", "compile"),
    RewriteRule("cmd/go/internal", "go"),
    RewriteRule("cmd/link/internal", "link"),
    RewriteRule("cmd/internal", ""),
    RewriteRule("internal", ""),
)


def has_path_prefix(path: str, prefix: str) -> bool:
    """
    Check if an import path starts with prefix at a segment boundary.

    "internal" is a prefix of "internal" and "internal/abi", but not of
    "internalx" or "cmd/internal".
    """
    return path == prefix or path.startswith(prefix + "/")


def join_import_path(*parts: str) -> str:
    """Join import path segments with "/", dropping empty ones."""
    return "/".join(part.strip("/") for part in parts if part and part.strip("/"))


class PathMapper:
    """
    Maps restricted packages to the public destination module.

    Rules are tried in table order and the first match wins. A path that no
    rule matches has no destination and is not copied.

    Attributes:
        module: Import path of the destination module (e.g., "example.com/x")
        src_root: Source root the package directories live under
        dst_root: Destination root the module is written to
        rules: Ordered rewrite rules
        restricted_prefixes: Prefixes whose import edges are followed
    """

    def __init__(
        self,
        module: str,
        src_root: Path,
        dst_root: Path,
        rules: Sequence[RewriteRule] = DEFAULT_RULES,
        restricted_prefixes: Iterable[str] | None = None,
    ) -> None:
        """
        Initialize the mapper.

        Args:
            module: Destination module import path
            src_root: Source root (usually $GOROOT/src)
            dst_root: Destination directory for the module
            rules: Ordered rewrite rules (default: DEFAULT_RULES)
            restricted_prefixes: Prefixes classified as restricted (default: the rule prefixes)
        """
        self.module = module.strip("/")
        self.src_root = Path(src_root)
        self.dst_root = Path(dst_root)
        self.rules = tuple(rules)
        if restricted_prefixes is None:
            restricted_prefixes = [rule.restricted for rule in self.rules]
        self.restricted_prefixes = tuple(restricted_prefixes)

        self._literal_re: re.Pattern[str] | None = None
        if self.rules:
            alternatives = "|".join(re.escape(rule.restricted) for rule in self.rules)
            self._literal_re = re.compile(
                rf"(?P<quote>[\"`])(?P<path>(?:{alternatives})/[^\"`\s/][^\"`\s]*)(?P=quote)"
            )

    def is_restricted(self, import_path: str) -> bool:
        """Return True if the import path lies in a restricted subtree."""
        return any(has_path_prefix(import_path, prefix) for prefix in self.restricted_prefixes)

    def match_rule(self, import_path: str) -> RewriteRule | None:
        """
        Find the rule that applies to an import path.

        Args:
            import_path: Import path relative to the source root (e.g., "internal/abi")

        Returns:
            The first matching rule in table order, or None
        """
        for rule in self.rules:
            if has_path_prefix(import_path, rule.restricted):
                return rule
        return None

    def map_import_path(self, import_path: str) -> str | None:
        """
        Map a restricted import path to its public import path.

        Only the matched prefix is replaced; everything below it keeps its
        relative structure.

        Args:
            import_path: Restricted import path

        Returns:
            Module-qualified public import path, or None if no rule applies
        """
        rule = self.match_rule(import_path)
        if rule is None:
            return None
        rest = import_path[len(rule.restricted) :]
        return join_import_path(self.module, rule.public, rest)

    def relative_source_path(self, source_dir: Path | str) -> str | None:
        """
        Express a package directory as a slash-separated path below src_root.

        Args:
            source_dir: Absolute package directory

        Returns:
            Relative path (e.g., "cmd/go/internal/base"), or None if the
            directory is outside src_root
        """
        source = Path(source_dir)
        for src_root, candidate in (
            (self.src_root, source),
            (self.src_root.resolve(), source.resolve()),
        ):
            if candidate.is_relative_to(src_root):
                return candidate.relative_to(src_root).as_posix()
        return None

    def map_destination(self, source_dir: Path | str) -> Path | None:
        """
        Map a package source directory to its destination directory.

        Args:
            source_dir: Absolute package directory under src_root

        Returns:
            Destination directory under dst_root, or None if the directory is
            outside src_root or no rule applies
        """
        relative = self.relative_source_path(source_dir)
        if relative is None:
            return None

        rule = self.match_rule(relative)
        if rule is None:
            return None

        rest = relative[len(rule.restricted) :]
        mapped = join_import_path(rule.public, rest)
        if not mapped:
            return self.dst_root
        return self.dst_root / mapped

    def map_import_literal(self, text: str) -> str:
        """
        Rewrite quoted restricted import paths in source text.

        Only string literals that start with a rule prefix followed by at
        least one more path segment are replaced. Strings that merely contain
        a restricted segment further in (e.g., "mything/internal/foo") are
        left alone, and so are bare roots like "internal" or "internal/",
        which are path comparisons rather than imports.

        Args:
            text: Go source text

        Returns:
            Text with restricted import literals pointing at the public module
        """
        if self._literal_re is None:
            return text

        def replace(match: re.Match[str]) -> str:
            mapped = self.map_import_path(match.group("path"))
            if mapped is None:
                return match.group(0)
            quote = match.group("quote")
            return f"{quote}{mapped}{quote}"

        return self._literal_re.sub(replace, text)
