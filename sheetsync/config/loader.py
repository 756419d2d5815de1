from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import DEFAULT_CSV_ENCODING, DEFAULT_LOGS_DIRECTORY, SyncConfig

"""Config loader.

Responsibilities:
- Load YAML config (default config/sync.yml)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults (active sheet, non-strict dates, utf-8-sig, ./logs)
- Layer environment variables and CLI flags on top (apply_overrides / env_overrides)
"""

__all__ = [
    "ConfigError",
    "SyncConfig",
    "load_config",
    "apply_overrides",
    "env_overrides",
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "ENV_VARIABLES",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/sync.yml")

# 環境変数 -> SyncConfig フィールド (.env からの読込も含む)
ENV_VARIABLES = {
    "SHEETSYNC_CSV_PATH": "csv_path",
    "SHEETSYNC_WORKBOOK_PATH": "workbook_path",
    "SHEETSYNC_KEY_COLUMN": "key_column",
    "SHEETSYNC_SHEET_NAME": "sheet_name",
}


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or the data fails validation
            (missing required keys, wrong types, unknown keys).
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


def load_config(path: Path) -> SyncConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    return SyncConfig(
        csv_path=data["csv_path"],
        workbook_path=data["workbook_path"],
        key_column=data["key_column"],
        sheet_name=data.get("sheet_name"),
        strict_dates=data.get("strict_dates", False),
        csv_encoding=data.get("csv_encoding", DEFAULT_CSV_ENCODING),
        logs_directory=data.get("logs_directory", DEFAULT_LOGS_DIRECTORY),
    )


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect SHEETSYNC_* overrides from the environment (empty values ignored)."""
    env = os.environ if environ is None else environ
    return {field: env[var] for var, field in ENV_VARIABLES.items() if env.get(var)}


def apply_overrides(config: SyncConfig, **overrides: Any) -> SyncConfig:
    """Return a copy of ``config`` with non-None overrides applied.

    Raises:
        ConfigError: unknown field name, or a required field overridden with ""
    """
    changes = {k: v for k, v in overrides.items() if v is not None}
    unknown = set(changes) - set(SyncConfig.__dataclass_fields__)
    if unknown:
        raise ConfigError(f"unknown config override(s): {sorted(unknown)}")
    for required in ("csv_path", "workbook_path", "key_column"):
        if required in changes and not changes[required]:
            raise ConfigError(f"{required} must not be empty")
    return replace(config, **changes) if changes else config
