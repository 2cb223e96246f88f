"""Base class for sensor readers."""

from abc import ABC, abstractmethod
import logging

logger = logging.getLogger(__name__)


class SensorReader(ABC):
    """Base class for all level sensor readers."""

    @abstractmethod
    def sample(self) -> float:
        """Take one raw sample from the sensor."""
        pass

    @abstractmethod
    def check_health(self) -> bool:
        """Basic health check - can we talk to our sensor?"""
        pass
