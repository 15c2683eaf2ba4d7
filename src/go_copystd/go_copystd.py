"""
Main entry point for the go-copystd package.

This module provides the command-line interface for the package.
It can be invoked via:
- The `go-copystd` command (after installation)
- `python -m go_copystd`
- Direct import and call to main()
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from .config import CopyConfig, load_config_file
from .errors import CopyStdError
from .manager import CopyManager
from .types import PackageState
from .utils import find_goroot_src


def split_packages(values: Sequence[str] | None) -> list[str]:
    """
    Flatten repeated, comma-separated --packages values.

    Args:
        values: Raw option values (e.g., ["internal/poll,internal/abi", "cmd/internal/obj"])

    Returns:
        Package queries in order, without blanks or duplicates
    """
    packages: list[str] = []
    for value in values or ():
        for item in value.split(","):
            item = item.strip()
            if item and item not in packages:
                packages.append(item)
    return packages


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="go-copystd",
        description=(
            "Copy Go standard library internal packages, along with their internal "
            "dependencies, into a public module"
        ),
    )
    parser.add_argument(
        "--packages",
        action="append",
        help="Comma-separated root packages to copy (e.g., 'internal/poll,cmd/internal/obj'). "
        "Can be specified multiple times.",
    )
    parser.add_argument(
        "--module",
        help="Import path of the destination module (e.g., 'example.com/x')",
    )
    parser.add_argument(
        "--src",
        type=Path,
        help="Source directory to resolve packages in (default: $GOROOT/src)",
    )
    parser.add_argument(
        "--dst",
        type=Path,
        help="Destination directory for the module (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="TOML config file (standalone or pyproject.toml with [tool.go-copystd])",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Rewrite packages whose destination directory already holds files",
    )
    parser.add_argument(
        "--analyze-only",
        action="store_true",
        help="Only resolve the closure and print destinations, don't write files",
    )
    parser.add_argument(
        "--go",
        dest="go_command",
        help="Go binary used to resolve packages (default: 'go')",
    )
    parser.add_argument(
        "--goimports",
        dest="goimports_command",
        help="goimports binary used to format copied files (default: 'goimports')",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the copy script.

    Parses command-line arguments and copies the requested packages.

    Args:
        argv: Arguments to parse (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    packages = split_packages(args.packages)
    if not packages:
        print("Error: --packages is required", file=sys.stderr)
        return 1

    try:
        file_settings = load_config_file(args.config) if args.config else {}

        src_root = args.src
        if src_root is None and "src" not in file_settings:
            src_root = find_goroot_src(args.go_command or str(file_settings.get("go", "go")))
            if src_root is None:
                print(
                    "Error: Could not find the Go source root ($GOROOT/src).\n"
                    "Please install Go, set GOROOT or specify --src",
                    file=sys.stderr,
                )
                return 1
            print(f"Auto-detected source directory: {src_root}")

        config = CopyConfig.from_mapping(
            file_settings,
            module=args.module,
            src_root=src_root,
            dst_root=args.dst,
            overwrite=args.overwrite,
            go_command=args.go_command,
            goimports_command=args.goimports_command,
        )

        manager = CopyManager(config)

        if args.analyze_only:
            destinations = manager.analyze(packages)
            print(f"\nFound {len(destinations)} restricted packages:")
            for import_path, target in destinations.items():
                print(f"  {import_path} -> {target if target is not None else '(no rule, skipped)'}")
            return 0

        outcomes = manager.run(packages)

        copied = [o for o in outcomes if o.state is PackageState.REWRITTEN]
        skipped = [o for o in outcomes if o.state is PackageState.SKIPPED]
        print(f"\nCopied {len(copied)} packages, skipped {len(skipped)}")
        return 0

    except (CopyStdError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
