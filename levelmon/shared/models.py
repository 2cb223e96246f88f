"""Core data models passed between the collection threads."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class Reading:
    """A single calibrated level reading.

    A reading without a capture time is stored with the database default
    timestamp.
    """
    value: float
    captured_at: Optional[datetime] = None

    def timestamp_text(self) -> Optional[str]:
        """Format the capture time the way it is written to the store."""
        if self.captured_at is None:
            return None
        return self.captured_at.isoformat(sep=" ", timespec="microseconds")


class ShutdownMarker:
    """Queue entry meaning no further readings will arrive."""

    _instance: Optional["ShutdownMarker"] = None

    def __new__(cls) -> "ShutdownMarker":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SHUTDOWN"


SHUTDOWN = ShutdownMarker()

QueueItem = Union[Reading, ShutdownMarker]


class ThreadMessage(Enum):
    """Control messages sent to the data collection thread."""
    TERMINATE = "terminate"
