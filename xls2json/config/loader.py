from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load the optional YAML config (config/convert.yml by default)
- Validate it against the packaged config_schema.json
- Apply defaults for every key that is not given
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/convert.yml")

DEFAULT_EXTENSIONS = (".xlsx", ".xls")
DEFAULT_OUTPUT_DIR_NAME = "json"
DEFAULT_INDENT = 2


def default_workers() -> int:
    # ThreadPoolExecutor の既定値と同じ上限
    return min(32, (os.cpu_count() or 1) + 4)


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ConvertConfig:
    source_directory: str = "."
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    output_dir_name: str = DEFAULT_OUTPUT_DIR_NAME
    workers: int = 0  # 0 -> default_workers()
    indent: int = DEFAULT_INDENT
    sort_keys: bool = False
    error_log: bool = False

    def __post_init__(self) -> None:
        if self.workers <= 0:
            object.__setattr__(self, "workers", default_workers())

    def with_overrides(self, **overrides: Any) -> ConvertConfig:
        """Return a copy with every non-None override applied (CLI > file)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing/invalid, or the data violates it
            (unknown keys, wrong types, out of range values).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path | None = None) -> ConvertConfig:
    """Load and validate the conversion config.

    ``path=None`` means the default location; a missing default file yields the
    built-in defaults, while an explicitly given missing file is an error.
    """
    explicit = path is not None
    cfg_path = path if path is not None else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        if explicit:
            raise ConfigError(f"config file not found: {cfg_path}")
        return ConvertConfig()
    try:
        data = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    return ConvertConfig(
        source_directory=data.get("source_directory", "."),
        extensions=tuple(data.get("extensions", DEFAULT_EXTENSIONS)),
        output_dir_name=data.get("output_dir_name", DEFAULT_OUTPUT_DIR_NAME),
        workers=data.get("workers", 0),
        indent=data.get("indent", DEFAULT_INDENT),
        sort_keys=data.get("sort_keys", False),
        error_log=data.get("error_log", False),
    )
