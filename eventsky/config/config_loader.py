"""YAML config loading with ``ENV:NAME`` indirection."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Tuple

import yaml

from eventsky.core.rsvp_core.rsvp_errors import ConfigError

SENSITIVE_NAME_TOKENS: Tuple[str, ...] = ("TOKEN", "KEY", "SECRET", "PASSWORD")


def _resolve_env(val: Any) -> Any:
    if isinstance(val, str) and val.startswith("ENV:"):
        env_key = val.split("ENV:", 1)[1].strip()
        v = os.environ.get(env_key)
        if v is None or v == "":
            raise ConfigError(f"Missing required environment variable: {env_key}")
        return v
    if isinstance(val, dict):
        return {k: _resolve_env(v) for k, v in val.items()}
    if isinstance(val, list):
        return [_resolve_env(v) for v in val]
    return val


def load_config(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw_text = f.read()
    try:
        raw = yaml.safe_load(raw_text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    return _resolve_env(raw)


def get_section(cfg: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = (cfg or {}).get(key) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section {key!r} must be a mapping")
    return section


def _redact_value(key: str, value: Any) -> Any:
    if isinstance(value, str) and any(tok in key.upper() for tok in SENSITIVE_NAME_TOKENS):
        return "****" if len(value) <= 4 else f"{'*' * 4}…{value[-4:]}"
    return value


def redacted(d: Any) -> Any:
    if isinstance(d, dict):
        return {k: redacted(v) if isinstance(v, (dict, list)) else _redact_value(k, v) for k, v in d.items()}
    if isinstance(d, list):
        return [redacted(v) for v in d]
    return d


def pretty(obj: Any) -> str:
    return json.dumps(obj, indent=2, sort_keys=True, default=str)
