"""Timed sampling loop that produces calibrated level readings."""

import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from levelmon.shared.channel import Channel, ChannelDisconnected
from levelmon.shared.models import QueueItem, Reading, SHUTDOWN, ThreadMessage
from .config.settings import CollectionSettings
from .errors import FatalSamplingError
from .readers.base import SensorReader

logger = logging.getLogger(__name__)

# time.sleep overflows long before the largest configurable wait
MAX_SLEEP_MILLISEC = 24 * 60 * 60 * 1000


class StopReason(Enum):
    """Why the sampler left its loop."""
    TERMINATED = "terminated"
    DISCONNECTED = "disconnected"
    CYCLE_LIMIT = "cycle_limit"


def take_collection(settings: CollectionSettings, reader: SensorReader) -> float:
    """Average `samples_per_collection` samples and apply the calibration offset.

    The offset is configured in microseconds and subtracted as milliseconds.

    Raises:
        FatalSamplingError: If real sensors are requested or the sample count is zero.
    """
    if not settings.simulate_sensor:
        raise FatalSamplingError("Working with real sensors not yet supported")

    num_samples = settings.samples_per_collection
    if num_samples <= 0:
        raise FatalSamplingError(f"samples_per_collection must be positive, got {num_samples}")

    samples = [reader.sample() for _ in range(num_samples)]
    average = sum(samples) / len(samples)

    return average - (settings.calibration_microsec / 1000.0)


class Sampler:
    """Produces one reading per cycle and decides when collection stops.

    The shutdown marker is sent on the reading channel on every exit path,
    so the writer always learns that no more readings will arrive.
    """

    def __init__(
        self,
        settings: CollectionSettings,
        reader: SensorReader,
        readings: Channel[QueueItem],
        termination: Channel[ThreadMessage],
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.settings = settings
        self.reader = reader
        self.readings = readings
        self.termination = termination
        self._sleep = sleep
        self._clock = clock
        self.cycles = 0

    def run(self) -> StopReason:
        """Run cycles until terminated, disconnected or the cycle limit is hit.

        Raises:
            FatalSamplingError: If the reader is unhealthy, a collection fails
                or the writer has gone away.
        """
        logger.info("Starting data collection...")
        try:
            if not self.reader.check_health():
                raise FatalSamplingError(f"{type(self.reader).__name__} failed its health check")
            return self._loop()
        finally:
            self._send_shutdown()

    def _loop(self) -> StopReason:
        max_cycles = self.settings.max_cycles
        while True:
            value = take_collection(self.settings, self.reader)
            reading = Reading(value=value, captured_at=self._clock())
            try:
                self.readings.send(reading)
            except ChannelDisconnected as e:
                raise FatalSamplingError(f"Reading queue receiver went away: {e}") from e
            self.cycles += 1
            logger.debug(f"Queued reading {reading.value:.4f} (cycle {self.cycles})")

            if max_cycles is not None and self.cycles >= max_cycles:
                logger.info(f"Reached cycle limit of {max_cycles}, stopping data collection")
                return StopReason.CYCLE_LIMIT

            reason = self._poll_termination()
            if reason is not None:
                return reason

            self._idle_wait()

    def _idle_wait(self) -> None:
        remaining = self.settings.millisec_between_readings
        while True:
            chunk = min(remaining, MAX_SLEEP_MILLISEC)
            self._sleep(chunk / 1000.0)
            remaining -= chunk
            if remaining <= 0:
                return

    def _poll_termination(self) -> Optional[StopReason]:
        try:
            message = self.termination.try_recv()
        except ChannelDisconnected:
            logger.warning("Data collection message sender went away, stopping")
            return StopReason.DISCONNECTED

        if message is ThreadMessage.TERMINATE:
            logger.info("Terminating data collection thread...")
            return StopReason.TERMINATED
        return None

    def _send_shutdown(self) -> None:
        try:
            self.readings.send(SHUTDOWN)
        except ChannelDisconnected:
            logger.warning("Could not send shutdown marker, writer already stopped")
