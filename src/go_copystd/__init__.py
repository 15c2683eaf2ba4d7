"""go-copystd - Copy Go standard library internal packages into a public module."""

__all__ = (
    "ClosureExpander",
    "ConfigError",
    "CopyConfig",
    "CopyManager",
    "CopyStdError",
    "FileRewriter",
    "FormatError",
    "GoImportsFormatter",
    "PackageDescriptor",
    "PackageError",
    "PackageOutcome",
    "PackageResolver",
    "PackageState",
    "PathMapper",
    "ResolverError",
    "RewriteResult",
    "RewriteRule",
    "find_goroot_src",
    "load_config_file",
)

from .closure import ClosureExpander
from .config import CopyConfig, load_config_file
from .errors import ConfigError, CopyStdError, FormatError, ResolverError
from .formatter import GoImportsFormatter
from .manager import CopyManager
from .mapper import PathMapper
from .resolver import PackageResolver
from .rewriter import FileRewriter
from .types import (
    PackageDescriptor,
    PackageError,
    PackageOutcome,
    PackageState,
    RewriteResult,
    RewriteRule,
)
from .utils import find_goroot_src
