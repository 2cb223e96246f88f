"""Sensor readers for data collection."""

from .base import SensorReader
from .simulated import SimulatedReader

__all__ = [
    "SensorReader",
    "SimulatedReader",
]
