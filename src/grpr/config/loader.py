"""
Configuration loader with deep merge.

Precedence order (lowest to highest):
1. Defaults (defined in the Pydantic schemas)
2. Environment variables

grpr forwards every command-line argument to the underlying tool, so the
environment is the only way to adjust its own behaviour.
"""

import os
from collections.abc import Mapping
from typing import Any

from .schema import AppConfig

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off", ""})


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursive dictionary merge.

    Args:
        base: Base dictionary
        override: Dictionary whose values win on conflicting leaves

    Returns:
        New merged dictionary.

    Example:
        >>> deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"b": 99}, "e": 4})
        {'a': {'b': 99, 'c': 2}, 'e': 4}
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    raise ValueError(f"{name} must be a boolean word (1/0, true/false, yes/no), got '{value}'")


def load_env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Load overrides from environment variables.

    Supported variables:
        GRPR_TOOL: overrides tool.executable
        GRPR_ROOT: overrides discovery.root
        GRPR_MARKERS: overrides discovery.markers (comma-separated)
        GRPR_LOG_LEVEL: overrides logging.level
        GRPR_LOG_FILE: overrides logging.file
        GRPR_VERBOSE: overrides logging.verbose (integer)
        GRPR_QUIET: overrides logging.quiet
        GRPR_REPORT_FILE: overrides report.file

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Dictionary with the overrides found

    Raises:
        ValueError: If GRPR_QUIET is not a recognised boolean word
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}

    if tool := env.get("GRPR_TOOL"):
        overrides.setdefault("tool", {})["executable"] = tool

    if root := env.get("GRPR_ROOT"):
        overrides.setdefault("discovery", {})["root"] = root

    if markers := env.get("GRPR_MARKERS"):
        overrides.setdefault("discovery", {})["markers"] = [
            m.strip() for m in markers.split(",") if m.strip()
        ]

    if log_level := env.get("GRPR_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = log_level.lower()

    if log_file := env.get("GRPR_LOG_FILE"):
        overrides.setdefault("logging", {})["file"] = log_file

    # Left as a string on purpose: pydantic reports non-integers
    if verbose := env.get("GRPR_VERBOSE"):
        overrides.setdefault("logging", {})["verbose"] = verbose

    if "GRPR_QUIET" in env:
        overrides.setdefault("logging", {})["quiet"] = _parse_bool("GRPR_QUIET", env["GRPR_QUIET"])

    if report_file := env.get("GRPR_REPORT_FILE"):
        overrides.setdefault("report", {})["file"] = report_file

    return overrides


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """Load and validate the complete application configuration.

    Args:
        environ: Mapping to read overrides from (defaults to os.environ)

    Returns:
        Validated AppConfig

    Raises:
        ValueError: If an environment value is malformed (pydantic's
            ValidationError is a ValueError subclass)
    """
    # Defaults come from the Pydantic models; env overrides are layered on top
    merged = deep_merge(AppConfig().model_dump(), load_env_overrides(environ))
    return AppConfig(**merged)
