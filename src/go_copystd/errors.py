"""
Exceptions raised while copying packages.

Missing source directories are not errors: they are reported as warnings and
skipped. Filesystem failures propagate as the OSError raised by pathlib.
"""

from __future__ import annotations


class CopyStdError(Exception):
    """Base class for all errors raised by go-copystd."""


class ResolverError(CopyStdError):
    """The package resolver could not produce a result."""


class FormatError(CopyStdError):
    """Rewritten source could not be formatted."""


class ConfigError(CopyStdError, ValueError):
    """Invalid configuration value or unreadable configuration file."""
