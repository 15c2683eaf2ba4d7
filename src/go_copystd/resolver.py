"""
Package resolution functionality.

This module provides the PackageResolver class, a thin wrapper around
`go list -json -e` that turns its output into PackageDescriptor objects.
"""

from __future__ import annotations

import json
import os
import subprocess
from collections.abc import Iterator
from pathlib import Path

from .errors import ResolverError
from .types import PackageDescriptor


class PackageResolver:
    """
    Queries the Go toolchain for package metadata.

    Because `-e` is passed, per-package load errors are reported inline on
    each descriptor instead of failing the whole call. The resolver does not
    inspect them; it only fails if no JSON result could be obtained.

    Attributes:
        src_root: Directory the query runs in
        go_command: Go binary used for the query
    """

    def __init__(self, src_root: Path, go_command: str = "go") -> None:
        """
        Initialize the resolver.

        Args:
            src_root: Directory to run `go list` in (usually $GOROOT/src)
            go_command: Go binary to invoke (default: "go" from PATH)
        """
        self.src_root = Path(src_root)
        self.go_command = go_command

    def resolve(self, *patterns: str) -> list[PackageDescriptor]:
        """
        Resolve package patterns to descriptors.

        Args:
            *patterns: Import paths, directories or patterns understood by `go list`

        Returns:
            Descriptors in the order reported by the Go toolchain

        Raises:
            ResolverError: If the process cannot be started, exits non-zero,
                or prints output that is not a JSON stream
        """
        cmd = [self.go_command, "list", "-json", "-e", *patterns]
        env = dict(os.environ)
        env["PWD"] = str(self.src_root)

        try:
            result = subprocess.run(
                cmd,
                cwd=self.src_root,
                env=env,
                capture_output=True,
                encoding="utf-8",
                check=False,
            )
        except FileNotFoundError as e:
            raise ResolverError(
                f"{self.go_command} command not found. Install Go or pass --go"
            ) from e
        except OSError as e:
            raise ResolverError(f"Could not run {' '.join(cmd)}: {e}") from e

        if result.returncode != 0:
            raise ResolverError(
                self._with_stderr(
                    f"{' '.join(cmd)} exited with status {result.returncode}", result.stderr
                )
            )

        try:
            return [PackageDescriptor.from_json(record) for record in iter_json_stream(result.stdout)]
        except ValueError as e:
            raise ResolverError(
                self._with_stderr(f"Could not decode output of {' '.join(cmd)}: {e}", result.stderr)
            ) from e

    @staticmethod
    def _with_stderr(message: str, stderr: str | None) -> str:
        if stderr and stderr.strip():
            return f"{message}\n{stderr.rstrip()}"
        return message


def iter_json_stream(text: str) -> Iterator[dict]:
    """
    Decode a stream of concatenated JSON objects.

    `go list -json` prints one indented object per package with no separator
    other than whitespace.

    Args:
        text: Raw output of the command

    Yields:
        Each decoded JSON object

    Raises:
        ValueError: If the stream holds malformed JSON or a non-object value
    """
    decoder = json.JSONDecoder()
    pos = 0
    end = len(text)
    while True:
        while pos < end and text[pos].isspace():
            pos += 1
        if pos >= end:
            return
        obj, pos = decoder.raw_decode(text, pos)
        if not isinstance(obj, dict):
            raise ValueError(f"expected a JSON object, got {type(obj).__name__}")
        yield obj
