"""Analysis configuration as an immutable value object, loaded from TOML or a mapping."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from dep_reconciler.exceptions import ConfigurationError

DEFAULT_SCRIPTABLE_FLAG = "$$$%%%"

_ENV_SKIP = "DEP_RECONCILER_SKIP"
_TOOL_TABLE = ("tool", "dep-reconciler")

# Original plugin parameter names accepted alongside the snake_case ones
_ALIASES = {
    "skip": "skip",
    "silent": "silent",
    "failOnWarning": "fail_on_warning",
    "verbose": "verbose",
    "ignoreNonCompile": "ignore_non_compile",
    "outputXML": "output_xml",
    "outputJSON": "output_json",
    "scriptableOutput": "scriptable_output",
    "scriptableFlag": "scriptable_flag",
    "usedDependencies": "used_dependencies",
    "ignoredDependencies": "ignored_dependencies",
    "ignoredUsedUndeclaredDependencies": "ignored_used_undeclared_dependencies",
    "ignoredUnusedDeclaredDependencies": "ignored_unused_declared_dependencies",
}


@dataclass(frozen=True)
class AnalyzeConfig:
    """Options for one dependency analysis run."""

    skip: bool = False
    silent: bool = False
    fail_on_warning: bool = False
    verbose: bool = False
    ignore_non_compile: bool = False
    output_xml: bool = False
    output_json: bool = False
    scriptable_output: bool = False
    scriptable_flag: str = DEFAULT_SCRIPTABLE_FLAG
    used_dependencies: tuple[str, ...] = ()  # groupId:artifactId
    ignored_dependencies: tuple[str, ...] = ()
    ignored_used_undeclared_dependencies: tuple[str, ...] = ()
    ignored_unused_declared_dependencies: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AnalyzeConfig:
        """Build a config from a mapping with snake_case or camelCase keys."""
        defaults = cls()
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for raw_key, value in data.items():
            key = _ALIASES.get(raw_key, raw_key)
            if key not in known:
                raise ConfigurationError(f"Unknown configuration key: {raw_key!r}")
            expected = getattr(defaults, key)
            if isinstance(expected, bool):
                if not isinstance(value, bool):
                    raise ConfigurationError(f"{raw_key!r} must be a boolean, got {value!r}")
            elif isinstance(expected, str):
                if not isinstance(value, str):
                    raise ConfigurationError(f"{raw_key!r} must be a string, got {value!r}")
            else:
                if isinstance(value, str) or not isinstance(value, (list, tuple)):
                    raise ConfigurationError(f"{raw_key!r} must be a list of strings")
                if not all(isinstance(v, str) for v in value):
                    raise ConfigurationError(f"{raw_key!r} must be a list of strings")
                value = tuple(value)
            values[key] = value
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> AnalyzeConfig:
        return replace(self, **overrides)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def load_config(path: str | Path | None = None) -> AnalyzeConfig:
    """Load a config from a TOML file (``[tool.dep-reconciler]`` or top level).

    ``DEP_RECONCILER_SKIP`` forces ``skip`` regardless of the file.
    """
    config = AnalyzeConfig()
    if path is not None:
        try:
            data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigurationError(f"Cannot read config {path}: {exc}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc
        table: Any = data
        if _TOOL_TABLE[0] in data:
            table = data[_TOOL_TABLE[0]].get(_TOOL_TABLE[1], {})
        if not isinstance(table, dict):
            raise ConfigurationError(f"[{'.'.join(_TOOL_TABLE)}] in {path} must be a table")
        config = AnalyzeConfig.from_mapping(table)
    if _env_flag(_ENV_SKIP):
        config = config.with_overrides(skip=True)
    return config
