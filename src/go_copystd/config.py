"""
Configuration for a copy run.

This module provides the CopyConfig class holding everything the copy
pipeline needs, and load_config_file() for reading settings from a TOML
file, either standalone or as a [tool.go-copystd] table in pyproject.toml.

Example config file:

    module = "example.com/x"
    dst = "third_party/gostd"
    skip_files = ["zbootstrap.go"]

    [[rules]]
    restricted = "cmd/go/internal"
    public = "go"

    [[rules]]
    restricted = "internal"
    public = ""
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

from .errors import ConfigError
from .mapper import DEFAULT_RULES
from .rewriter import DEFAULT_SKIP_FILES
from .types import RewriteRule

TOOL_TABLE = "go-copystd"


@dataclass
class CopyConfig:
    """
    Settings for copying restricted packages into a public module.

    Attributes:
        module: Import path of the destination module
        src_root: Source root the packages are resolved from (usually $GOROOT/src)
        dst_root: Directory the destination module is written to
        rules: Ordered restricted -> public prefix rules
        restricted_prefixes: Prefixes whose import edges are followed
            (None means the rule prefixes)
        skip_files: File names never copied
        overwrite: Rewrite packages whose destination already holds files
        go_command: Go binary used for package resolution
        goimports_command: goimports binary used for formatting
    """

    module: str
    src_root: Path
    dst_root: Path = field(default_factory=Path.cwd)
    rules: tuple[RewriteRule, ...] = DEFAULT_RULES
    restricted_prefixes: tuple[str, ...] | None = None
    skip_files: tuple[str, ...] = DEFAULT_SKIP_FILES
    overwrite: bool = False
    go_command: str = "go"
    goimports_command: str = "goimports"

    def __post_init__(self) -> None:
        self.module = (self.module or "").strip().strip("/")
        self.src_root = Path(self.src_root)
        self.dst_root = Path(self.dst_root)
        self.rules = tuple(self.rules)
        if self.restricted_prefixes is not None:
            self.restricted_prefixes = tuple(self.restricted_prefixes)
        self.skip_files = tuple(self.skip_files)
        self.validate()

    def validate(self) -> None:
        """
        Check the configuration for values the pipeline cannot work with.

        Raises:
            ConfigError: If the module is empty, the rule table is empty or a
                rule has an empty restricted prefix
        """
        if not self.module:
            raise ConfigError("Destination module path is required (--module)")
        if not self.rules:
            raise ConfigError("At least one rewrite rule is required")
        for rule in self.rules:
            if not rule.restricted.strip("/"):
                raise ConfigError(f"Rewrite rule has an empty restricted prefix: {rule}")

    @classmethod
    def from_mapping(cls, data: dict[str, Any], **overrides: Any) -> CopyConfig:
        """
        Build a config from a decoded config-file table.

        Keyword overrides that are None are ignored, so command-line options
        that were not given fall back to the file values.

        Args:
            data: Table as returned by load_config_file()
            **overrides: Values taking precedence over the file

        Returns:
            Validated CopyConfig

        Raises:
            ConfigError: If a value has the wrong shape
        """
        values: dict[str, Any] = {}
        if "module" in data:
            values["module"] = data["module"]
        if "src" in data:
            values["src_root"] = Path(data["src"])
        if "dst" in data:
            values["dst_root"] = Path(data["dst"])
        if "rules" in data:
            values["rules"] = parse_rules(data["rules"])
        if "restricted_prefixes" in data:
            values["restricted_prefixes"] = _string_list(data, "restricted_prefixes")
        if "skip_files" in data:
            values["skip_files"] = _string_list(data, "skip_files")
        if "overwrite" in data:
            values["overwrite"] = bool(data["overwrite"])
        if "go" in data:
            values["go_command"] = str(data["go"])
        if "goimports" in data:
            values["goimports_command"] = str(data["goimports"])

        values.update({key: value for key, value in overrides.items() if value is not None})

        if "src_root" not in values:
            raise ConfigError("Source root is required (--src)")
        values.setdefault("module", "")
        return cls(**values)


def parse_rules(raw: Any) -> tuple[RewriteRule, ...]:
    """
    Parse the [[rules]] array of a config file.

    Args:
        raw: List of tables with "restricted" and optional "public" keys

    Returns:
        Rules in file order

    Raises:
        ConfigError: If the value is not a list of tables with a restricted prefix
    """
    if not isinstance(raw, list):
        raise ConfigError("'rules' must be an array of tables")

    rules: list[RewriteRule] = []
    for entry in raw:
        if not isinstance(entry, dict) or "restricted" not in entry:
            raise ConfigError(f"Invalid rule {entry!r}: expected a table with 'restricted'")
        rules.append(
            RewriteRule(
                restricted=str(entry["restricted"]).strip("/"),
                public=str(entry.get("public", "")).strip("/"),
            )
        )
    return tuple(rules)


def _string_list(data: dict[str, Any], key: str) -> tuple[str, ...]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return tuple(value)


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Read go-copystd settings from a TOML file.

    A pyproject.toml-style file is read from its [tool.go-copystd] table;
    any other file is read from its top level.

    Args:
        path: TOML file to read

    Returns:
        Settings table (may be empty)

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    if tomllib is None:
        raise ConfigError("Reading config files requires tomli on Python < 3.11")

    try:
        data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e

    tool = data.get("tool")
    if isinstance(tool, dict) and TOOL_TABLE in tool:
        table = tool[TOOL_TABLE]
        if not isinstance(table, dict):
            raise ConfigError(f"[tool.{TOOL_TABLE}] in {path} must be a table")
        return table

    return data
