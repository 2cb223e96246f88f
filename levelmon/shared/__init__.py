"""Shared utilities for levelmon services."""

from .models import Reading, ShutdownMarker, SHUTDOWN, ThreadMessage
from .channel import Channel, ChannelDisconnected
from .database import StoreConfig, ReadingsStorage
from .config import load_yaml_config, get_config_path
from .logging import setup_logging

__all__ = [
    "Reading",
    "ShutdownMarker",
    "SHUTDOWN",
    "ThreadMessage",
    "Channel",
    "ChannelDisconnected",
    "StoreConfig",
    "ReadingsStorage",
    "load_yaml_config",
    "get_config_path",
    "setup_logging",
]
