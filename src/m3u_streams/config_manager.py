#!/usr/bin/env python3
"""Configuration management utilities for the M3U stream parser."""
from __future__ import annotations
import json
import logging
import os
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/113.0.0.0 Safari/537.36"
)

DEFAULT_CONFIG: Dict[str, Any] = {
    # Sent with every liveness probe and playlist download
    "user_agent": DEFAULT_USER_AGENT,
    # Per-request timeout in seconds
    "timeout": 5,
    # Retries per probe on connection errors and 429/5xx responses
    "retries": 3,
    # Max number of probes running at the same time
    "max_workers": 20,
    "log_level": "INFO",
}


def get_default_config() -> Dict[str, Any]:
    """Return a fresh copy of the default configuration."""
    return json.loads(json.dumps(DEFAULT_CONFIG))


def load_config(config_path: str | os.PathLike | None) -> Dict[str, Any]:
    """Load configuration from a JSON file merged over the defaults.

    A missing or unreadable file falls back to the defaults.
    """
    config = get_default_config()
    if not config_path:
        return config
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.loads(f.read().strip() or "{}")
    except FileNotFoundError:
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return config
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to load config {config_path} ({e}), using defaults")
        return config
    if not isinstance(data, dict):
        logger.warning(f"Config file {config_path} is not a JSON object, using defaults")
        return config
    unknown = set(data) - set(DEFAULT_CONFIG)
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
    for key in DEFAULT_CONFIG:
        if key in data and data[key] is not None:
            config[key] = data[key]
    return config


def resolve_config(config: Dict[str, Any] | None = None, **overrides: Any) -> Dict[str, Any]:
    """Merge explicit overrides (ignoring None) over a config dict or the defaults."""
    resolved = get_default_config()
    if config:
        resolved.update({k: v for k, v in config.items() if k in DEFAULT_CONFIG})
    for key, value in overrides.items():
        if value is not None:
            resolved[key] = value
    return resolved
