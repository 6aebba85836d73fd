"""Runtime configuration assembly for the CLI.

Builds the immutable ``ResolverConfig`` from, lowest precedence first:
built-in defaults, the ``--config`` file, the environment and CLI flags.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import re
from typing import Any, Dict, Mapping, Optional

import yaml

from constants import Constants
from common.errors import ConfigError
from versioning.models import ResolverConfig

logger = logging.getLogger(__name__)

# CLI dest -> ResolverConfig field
_CLI_FIELDS = {
    "REGISTRY_URL": "registry_url",
    "STRATEGY": "strategy",
    "DIRECT_ONLY": "direct_only",
    "MAX_CONCURRENCY": "max_concurrency",
    "REQUEST_TIMEOUT": "request_timeout",
    "DYNAMIC_DISCOVERY": "dynamic_discovery",
    "DISABLE_SHALLOW_CLONE": "disable_shallow_clone",
    "DISABLE_SUBMODULES": "disable_submodules",
    "DISABLE_FSCKOBJECTS": "disable_fsckobjects",
}

_FIELD_TYPES = {f.name: f.type for f in dataclasses.fields(ResolverConfig)}


def _check_type(key: str, value: Any) -> Any:
    expected = _FIELD_TYPES[key]
    if expected in ("bool", bool):
        if not isinstance(value, bool):
            raise ConfigError(f"config key {key!r}: expected true/false, got {value!r}")
        return value
    if expected in ("int", int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"config key {key!r}: expected an integer, got {value!r}")
        return value
    if expected in ("float", float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"config key {key!r}: expected a number, got {value!r}")
        return float(value)
    if not isinstance(value, str):
        raise ConfigError(f"config key {key!r}: expected a string, got {value!r}")
    return value


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Load configuration values from a YAML or JSON file.

    A top-level ``modsource`` section is used when present, otherwise the
    whole document. Keys may be written with dashes or underscores.

    Raises:
        ConfigError: If the file is missing, unparsable or has unknown keys.
    """
    if not os.path.isfile(config_path):
        raise ConfigError(f"load config {config_path}: file not found")
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"load config {config_path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"load config {config_path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"load config {config_path}: expected a mapping at top level")
    section = data.get("modsource", data)
    if not isinstance(section, dict):
        raise ConfigError(f"load config {config_path}: 'modsource' must be a mapping")

    values: Dict[str, Any] = {}
    for raw_key, value in section.items():
        key = str(raw_key).replace("-", "_")
        if key not in _FIELD_TYPES:
            raise ConfigError(f"load config {config_path}: unknown key {raw_key!r}")
        values[key] = _check_type(key, value)
    logger.info("Loaded config from: %s", config_path)
    return values


def registry_from_goproxy(value: str) -> Optional[str]:
    """Return the first http(s) proxy URL in a GOPROXY-style list."""
    for entry in re.split(r"[,|]", value or ""):
        entry = entry.strip()
        if entry.startswith(("https://", "http://")):
            return entry
    return None


def build_config(args: Any, environ: Optional[Mapping[str, str]] = None) -> ResolverConfig:
    """Assemble the resolver configuration.

    Args:
        args: Parsed CLI namespace.
        environ: Environment mapping; defaults to ``os.environ``.

    Raises:
        ConfigError: For unreadable files or invalid values.
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    config_path = getattr(args, "CONFIG", None)
    if config_path:
        values.update(load_config_file(config_path))

    proxy = registry_from_goproxy(environ.get(Constants.ENV_GOPROXY, ""))
    if proxy:
        values["registry_url"] = proxy

    for dest, key in _CLI_FIELDS.items():
        value = getattr(args, dest, None)
        if value is not None:
            values[key] = value

    if values.get("strategy", ResolverConfig.strategy) not in Constants.SUPPORTED_STRATEGIES:
        raise ConfigError(f"unsupported strategy {values['strategy']!r}")
    if values.get("max_concurrency", 0) < 0:
        raise ConfigError("max_concurrency must not be negative")
    if values.get("request_timeout", 0) < 0:
        raise ConfigError("request_timeout must not be negative")
    if not values.get("registry_url", ResolverConfig.registry_url):
        raise ConfigError("registry_url must not be empty")

    return ResolverConfig(**values)
