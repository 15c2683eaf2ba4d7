"""
Source formatting functionality.

This module provides the GoImportsFormatter class which runs rewritten Go
source through `goimports` so the import block is regrouped around the new
module path and the file is gofmt-clean.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from .errors import FormatError

GOIMPORTS_INSTALL_HINT = "go install golang.org/x/tools/cmd/goimports@latest"


class GoImportsFormatter:
    """
    Formats Go source with goimports.

    Attributes:
        local_prefix: Import path prefix grouped after third-party imports
            (the destination module path)
        command: goimports binary to invoke
    """

    def __init__(self, local_prefix: str, command: str = "goimports") -> None:
        """
        Initialize the formatter.

        Args:
            local_prefix: Destination module path passed as `-local`
            command: goimports binary (default: "goimports" from PATH)
        """
        self.local_prefix = local_prefix
        self.command = command

    def is_installed(self) -> bool:
        """Check if goimports is installed."""
        try:
            subprocess.run([self.command, "-h"], capture_output=True, check=False)
            return True
        except OSError:
            return False

    def missing_message(self) -> str:
        return (
            f"{self.command} is required for formatting. "
            f"Install it with: {GOIMPORTS_INSTALL_HINT}"
        )

    def format(self, file_name: str, content: bytes, src_dir: Path | None = None) -> bytes:
        """
        Format one Go source file.

        Args:
            file_name: Name of the file, used in error messages
            content: Raw source content
            src_dir: Directory the file will live in, used by goimports to
                pick candidate imports

        Returns:
            Formatted content

        Raises:
            FormatError: If goimports is missing or rejects the content
        """
        cmd = [self.command]
        if self.local_prefix:
            cmd.extend(["-local", self.local_prefix])
        if src_dir is not None:
            cmd.extend(["-srcdir", str(src_dir)])

        try:
            result = subprocess.run(cmd, input=content, capture_output=True, check=False)
        except OSError as e:
            raise FormatError(self.missing_message()) from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise FormatError(f"Could not format {file_name}: {stderr or 'goimports failed'}")

        return result.stdout
