import logging

from .base import SensorReader

logger = logging.getLogger(__name__)

class SimulatedReader(SensorReader):
    def __init__(self, value: float = 4.07):
        """
        Stands in for the level sensor by returning the same value on every
        sample, so averaged readings are deterministic.
        """
        self.value = value
        self.samples_taken = 0
        logger.info(f"Initialized SimulatedReader returning {value}")

    def sample(self) -> float:
        self.samples_taken += 1
        return self.value

    def check_health(self) -> bool:
        # Simulated reader is always healthy
        return True
