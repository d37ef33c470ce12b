"""
Configuration loader for the plugin toolkit.

Configuration lives in a YAML file with three optional top-level
sections:

    logging:    {level: INFO, format: "..."}
    providers:  {<dialect>: {enabled: true, ...dialect options}}
    plugins:    {<plugin>: {enabled: true, ...plugin options}}

Secrets such as search API keys are not stored in the file; plugins
read them from the environment variables the file names.
"""

import os
from typing import Any, Dict

import yaml

SECTIONS = ("logging", "providers", "plugins")


def load_app_config(path: str) -> Dict[str, Any]:
    """
    Load the application configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The configuration mapping, with every known section present
        (empty when the file omits it).

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the top level or a known section is not a mapping.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError("Top-level configuration must be a mapping/dictionary.")

    for section in SECTIONS:
        value = data.get(section)
        if value is None:
            data[section] = {}
        elif not isinstance(value, dict):
            raise ValueError(f"Configuration section '{section}' must be a mapping.")

    return data


def section_entry(cfg: Dict[str, Any], section: str, name: str) -> Dict[str, Any]:
    """Return `cfg[section][name]` as a dict, or {} when absent."""
    entry = (cfg.get(section) or {}).get(name)
    if entry is None:
        return {}
    if not isinstance(entry, dict):
        raise ValueError(f"Configuration entry '{section}.{name}' must be a mapping.")
    return entry


def is_enabled(cfg: Dict[str, Any], section: str, name: str) -> bool:
    return bool(section_entry(cfg, section, name).get("enabled", False))
