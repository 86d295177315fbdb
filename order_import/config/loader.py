from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load YAML config/import.yml
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults (sheet="0", nested=True, output_directory=./output, timeout=30)
- Environment overrides for the API connection (API_BASE_URL / API_TOKEN)
"""

__all__ = [
    "SCHEMA_PATH",
    "ApiConfig",
    "ConfigError",
    "ImportConfig",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"

DEFAULT_SHEET = "0"
DEFAULT_OUTPUT_DIRECTORY = "./output"
DEFAULT_TIMEOUT = 30.0


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ApiConfig:
    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    token: str | None = None

    def resolved(self) -> ApiConfig:
        """Return a copy with environment variables applied.

        優先順位: API_BASE_URL / API_TOKEN 環境変数 (.env 読み込み後) > YAML
        """
        return ApiConfig(
            base_url=os.getenv("API_BASE_URL") or self.base_url,
            timeout=self.timeout,
            token=os.getenv("API_TOKEN") or self.token,
        )


@dataclass(frozen=True)
class ImportConfig:
    api: ApiConfig
    sheet: str = DEFAULT_SHEET  # index ("0") または シート名
    nested: bool = True
    output_directory: str = DEFAULT_OUTPUT_DIRECTORY


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or the data violates it
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


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    api_raw = data["api"]
    api = ApiConfig(
        base_url=api_raw["base_url"],
        timeout=float(api_raw.get("timeout", DEFAULT_TIMEOUT)),
        token=api_raw.get("token"),
    )
    return ImportConfig(
        api=api,
        sheet=str(data.get("sheet", DEFAULT_SHEET)),
        nested=bool(data.get("nested", True)),
        output_directory=data.get("output_directory", DEFAULT_OUTPUT_DIRECTORY),
    )
