"""Configuration loading utilities."""

import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import yaml
from dotenv import load_dotenv

ENV_PREFIX = "LEVELMON_"


def get_environment() -> str:
    """Get the current environment name.

    Returns:
        Environment name from LEVELMON_ENV, defaults to 'levelmon'.
    """
    return os.getenv(f"{ENV_PREFIX}ENV", "levelmon")


def get_config_path(
    config_name: Optional[str] = None,
    config_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """Get path to a configuration file.

    Args:
        config_name: Name of config file (without path). If None, uses
            config-{environment}.yaml based on LEVELMON_ENV.
        config_dir: Directory containing config files. If None, uses
            the 'config' directory at the repo root, falling back to the
            current directory when that file does not exist.

    Returns:
        Path to the configuration file.
    """
    if config_name is None:
        config_name = f"config-{get_environment()}.yaml"

    if config_dir is not None:
        return Path(config_dir) / config_name

    # repo_root/config/ when running from a checkout
    repo_root = Path(__file__).parent.parent.parent
    candidate = repo_root / "config" / config_name
    if candidate.exists():
        return candidate
    return Path(config_name)


def load_yaml_config(
    config_path: Optional[Union[str, Path]] = None,
    load_env: bool = True,
) -> dict:
    """Load YAML configuration file.

    Args:
        config_path: Path to config file. If None, uses LEVELMON_CONFIG or
            get_config_path().
        load_env: Whether to load .env file first.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid YAML.
    """
    if load_env:
        load_dotenv()

    if config_path is None:
        override = os.getenv(f"{ENV_PREFIX}CONFIG")
        config_path = Path(override) if override else get_config_path()
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def apply_env_overrides(
    section: Dict[str, Any],
    keys: Iterable[str],
    prefix: str = ENV_PREFIX,
    raw_keys: Iterable[str] = (),
) -> Dict[str, Any]:
    """Overlay prefixed environment variables onto a config section.

    Values are parsed as YAML scalars so "true", "42" and "1.5" keep their
    natural types, except for `raw_keys`, which stay plain strings.

    Args:
        section: Values loaded from the config file.
        keys: Field names that may be overridden.
        prefix: Environment variable prefix.
        raw_keys: Fields whose overrides are taken verbatim.

    Returns:
        A new dictionary with overrides applied.
    """
    merged = dict(section)
    raw_keys = set(raw_keys)
    for key in keys:
        raw = os.getenv(f"{prefix}{key.upper()}")
        if raw is None:
            continue
        if key in raw_keys:
            merged[key] = raw
        else:
            merged[key] = yaml.safe_load(raw) if raw.strip() else None
    return merged


def get_log_level(config: dict) -> str:
    """Extract log level from config, with sensible default.

    Args:
        config: Configuration dictionary.

    Returns:
        Log level string (e.g., 'INFO', 'DEBUG').
    """
    level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL") or config.get("log_level") or "INFO"
    return str(level).upper()
