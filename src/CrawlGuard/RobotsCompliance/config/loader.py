# === NAVMAP v1 ===
# {
#   "module": "CrawlGuard.RobotsCompliance.config.loader",
#   "purpose": "Configuration loading with file/env/override precedence.",
#   "sections": [
#     {"id": "read-file", "name": "_read_file", "anchor": "function-read-file", "kind": "function"},
#     {"id": "merge-env-overrides", "name": "_merge_env_overrides", "anchor": "function-merge-env-overrides", "kind": "function"},
#     {"id": "load-config", "name": "load_config", "anchor": "function-load-config", "kind": "function"},
#     {"id": "export-config-schema", "name": "export_config_schema", "anchor": "function-export-config-schema", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""
Configuration Loading with File/Env/Override Precedence

Implements three-level config composition:
1. **File level** (YAML/JSON): base configuration
2. **Environment level**: CRAWLGUARD_* prefixed variables override file
3. **Override level**: programmatic overrides win

Environment variables use double-underscore notation:
  CRAWLGUARD_ROBOTS__USER_AGENT_NAME="MyBot"  →  robots.user_agent_name="MyBot"
  CRAWLGUARD_ROBOTS__ENABLED=false            →  robots.enabled=False
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigError
from .models import CrawlGuardConfig

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "CRAWLGUARD_"


def _read_file(path: str | Path) -> dict[str, Any]:
    """
    Read YAML or JSON config file.

    Raises:
        ConfigError: If the file is missing, unreadable, malformed or of
            an unsupported format.
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    suffix = p.suffix.lower()

    if suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    elif suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    else:
        raise ConfigError(f"Unsupported file format: {suffix}. Use .yaml or .json")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at top level")
    return data


def _assign_nested(data: dict[str, Any], dotted_key: str, value: Any) -> None:
    """Assign ``value`` under a dot-separated path, creating dicts as needed."""
    keys = dotted_key.split(".")
    current = data

    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]

    current[keys[-1]] = value


def _coerce_env_value(value: str) -> Any:
    """JSON-decode an environment value, falling back to the raw string."""
    try:
        return json.loads(value)
    except ValueError:
        pass

    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    return value


def _merge_env_overrides(data: dict[str, Any], env_prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Overlay ``<prefix>SECTION__FIELD`` environment variables onto ``data``."""
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        relative_key = env_key[len(env_prefix) :].lower()
        dotted_key = relative_key.replace("__", ".")

        coerced_value = _coerce_env_value(env_value)
        _assign_nested(data, dotted_key, coerced_value)
        _LOGGER.debug(f"Environment override: {env_key} → {dotted_key} = {coerced_value!r}")

    return data


def _merge_overrides(data: dict[str, Any], overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """Recursively merge ``overrides`` into ``data``; later values win."""
    if not overrides:
        return data

    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(data.get(key), dict):
            data[key] = _merge_overrides(data[key], value)
        else:
            data[key] = dict(value) if isinstance(value, Mapping) else value

    return data


def load_config(
    path: str | Path | None = None,
    env_prefix: str = ENV_PREFIX,
    overrides: Mapping[str, Any] | None = None,
) -> CrawlGuardConfig:
    """
    Load CrawlGuardConfig from file, environment, and overrides.

    **Precedence:** file < environment < overrides

    Args:
        path: Path to YAML/JSON config file (optional)
        env_prefix: Environment variable prefix (default: CRAWLGUARD_)
        overrides: Nested override dict, e.g. ``{"robots": {"enabled": False}}``

    Returns:
        Validated CrawlGuardConfig instance

    Raises:
        ConfigError: If the config file cannot be read or parsed
        pydantic.ValidationError: If the merged values are invalid
    """
    data: dict[str, Any] = {}

    if path:
        data = _read_file(path)
        _LOGGER.info(f"Loaded config from {path}")

    data = _merge_env_overrides(data, env_prefix)
    data = _merge_overrides(data, overrides)

    config = CrawlGuardConfig.model_validate(data)
    _LOGGER.debug(f"Configuration validated. Config hash: {config.config_hash()[:8]}...")
    return config


def export_config_schema() -> dict[str, Any]:
    """Export the JSON schema for CrawlGuardConfig."""
    return CrawlGuardConfig.model_json_schema()


__all__ = ["ENV_PREFIX", "load_config", "export_config_schema"]
