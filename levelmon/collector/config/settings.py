import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from levelmon.shared.config import apply_env_overrides, get_log_level, load_yaml_config
from levelmon.collector.errors import ConfigurationError

MAX_SAMPLES_PER_COLLECTION = 255
MAX_MILLISEC_BETWEEN_READINGS = 2**64 - 1


@dataclass(frozen=True)
class CollectionSettings:
    samples_per_collection: int
    calibration_microsec: float
    simulate_sensor: bool
    millisec_between_readings: int
    db_filename: str
    # None runs until a termination request arrives
    max_cycles: Optional[int] = None
    simulated_value: float = 4.07


@dataclass(frozen=True)
class Config:
    data_collection: CollectionSettings
    log_level: str = "INFO"


REQUIRED_FIELDS = (
    "samples_per_collection",
    "calibration_microsec",
    "simulate_sensor",
    "millisec_between_readings",
    "db_filename",
)

# Env overrides for these are not parsed as YAML
STRING_FIELDS = ("db_filename",)


def _require_int(name: str, value: Any, low: int, high: Optional[int] = None) -> int:
    # bool is an int subclass; `true` is not a sample count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < low or (high is not None and value > high):
        upper = "" if high is None else f"..{high}"
        raise ConfigurationError(f"{name} must be in range {low}{upper}, got {value}")
    return value


def _require_float(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")
    return value


def _require_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{name} must be true or false, got {value!r}")
    return value


def parse_collection_settings(data: Dict[str, Any]) -> CollectionSettings:
    """Validate a data_collection mapping and build the settings snapshot"""
    missing = [name for name in REQUIRED_FIELDS if data.get(name) is None]
    if missing:
        raise ConfigurationError(f"Missing data_collection settings: {', '.join(missing)}")

    db_filename = data["db_filename"]
    if not isinstance(db_filename, str) or not db_filename.strip():
        raise ConfigurationError(f"db_filename must be a non-empty string, got {db_filename!r}")

    max_cycles = data.get("max_cycles")
    if max_cycles is not None:
        max_cycles = _require_int("max_cycles", max_cycles, 1)

    simulated_value = data.get("simulated_value")
    simulated_value = 4.07 if simulated_value is None else _require_float("simulated_value", simulated_value)

    return CollectionSettings(
        samples_per_collection=_require_int(
            "samples_per_collection", data["samples_per_collection"], 1, MAX_SAMPLES_PER_COLLECTION
        ),
        calibration_microsec=_require_float("calibration_microsec", data["calibration_microsec"]),
        simulate_sensor=_require_bool("simulate_sensor", data["simulate_sensor"]),
        millisec_between_readings=_require_int(
            "millisec_between_readings", data["millisec_between_readings"], 0, MAX_MILLISEC_BETWEEN_READINGS
        ),
        db_filename=db_filename,
        max_cycles=max_cycles,
        simulated_value=simulated_value,
    )


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """Load configuration from YAML file with environment variable overrides"""
    try:
        config_data = load_yaml_config(path)
    except FileNotFoundError as e:
        raise ConfigurationError(str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid configuration file: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigurationError("Configuration file must contain a mapping")

    section = config_data.get("data_collection") or {}
    if not isinstance(section, dict):
        raise ConfigurationError("data_collection must be a mapping")

    try:
        section = apply_env_overrides(
            section,
            [f.name for f in fields(CollectionSettings)],
            raw_keys=STRING_FIELDS,
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid environment override: {e}") from e

    return Config(
        data_collection=parse_collection_settings(section),
        log_level=get_log_level(config_data),
    )
