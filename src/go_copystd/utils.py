"""
Utility functions for Go root discovery and file comparison.
"""

from __future__ import annotations

import hashlib
import os
import subprocess
from pathlib import Path


def find_goroot_src(go_command: str = "go") -> Path | None:
    """
    Find the source directory of the host Go standard library.

    Uses the GOROOT environment variable when set, otherwise asks the Go
    toolchain via `go env GOROOT`.

    Args:
        go_command: Go binary to query (default: "go" from PATH)

    Returns:
        Path to $GOROOT/src, or None if it cannot be determined
    """
    goroot = os.environ.get("GOROOT")
    if not goroot:
        try:
            result = subprocess.run(
                [go_command, "env", "GOROOT"],
                capture_output=True,
                encoding="utf-8",
                check=False,
            )
        except OSError:
            return None
        if result.returncode != 0:
            return None
        goroot = result.stdout.strip()

    if not goroot:
        return None

    src = Path(goroot) / "src"
    if src.is_dir():
        return src
    return None


def content_digest(data: bytes) -> str:
    """Return the sha256 hex digest of data."""
    return hashlib.sha256(data).hexdigest()


def file_digest(path: Path) -> str | None:
    """
    Return the sha256 hex digest of a file's content.

    Args:
        path: File to hash

    Returns:
        Hex digest, or None if the path is not a regular file
    """
    if not path.is_file():
        return None
    return content_digest(path.read_bytes())


def has_files(path: Path) -> bool:
    """
    Check if a directory directly contains at least one regular file.

    Subdirectories are not looked into, so a directory holding only nested
    packages is not considered populated.

    Args:
        path: Directory to check

    Returns:
        True if the directory exists and holds a file
    """
    if not path.exists() or not path.is_dir():
        return False

    return any(item.is_file() for item in path.iterdir())
