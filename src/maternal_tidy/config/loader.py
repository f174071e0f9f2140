from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.dataset_run import DatasetSpec
from ..models.tidy_rules import TidyRules

"""Config loader.

Responsibilities:
- Load YAML (default config/tidy.yml)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults (file backend writing to ./data, default TidyRules)
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/tidy.yml")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    host: str | None
    port: int | None
    user: str | None
    password: str | None
    database: str | None
    dsn: str | None


@dataclass(frozen=True)
class OutputConfig:
    backend: str  # "file" | "postgres"
    directory: str  # file backend の出力先
    table_prefix: str  # postgres backend のテーブル名接頭辞


@dataclass(frozen=True)
class TidyConfig:
    source_directory: str
    datasets: list[DatasetSpec]  # config 記載順
    output: OutputConfig
    rules: TidyRules
    database: DatabaseConfig

    def dataset(self, name: str) -> DatasetSpec:
        for spec in self.datasets:
            if spec.name == name:
                return spec
        raise KeyError(name)


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


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> TidyConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    try:
        rules = TidyRules.with_overrides(data.get("rules"))
    except ValueError as e:
        raise ConfigError(f"invalid rules: {e}") from e

    out_raw = data.get("output") or {}
    output = OutputConfig(
        backend=out_raw.get("backend", "file"),
        directory=out_raw.get("directory", "./data"),
        table_prefix=out_raw.get("table_prefix", ""),
    )
    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    datasets = [DatasetSpec(name=name, file=file) for name, file in data["datasets"].items()]
    return TidyConfig(
        source_directory=data["source_directory"],
        datasets=datasets,
        output=output,
        rules=rules,
        database=db,
    )
