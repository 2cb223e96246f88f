"""Consumes queued readings and appends them to the store in order."""

import logging
import sqlite3
from enum import Enum
from typing import Optional

from levelmon.shared.channel import Channel, ChannelDisconnected
from levelmon.shared.database import ReadingsStorage
from levelmon.shared.models import QueueItem, ShutdownMarker
from .errors import StoreInitializationError, StoreWriteError

logger = logging.getLogger(__name__)


class WriterState(Enum):
    """Writer lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"  # shutdown marker received
    FAILED = "failed"  # store append failed
    STOPPED = "stopped"


class ReadingWriter:
    """Sole owner of the store connection.

    Readings are appended one at a time in the order they were queued. A
    failed append is not retried: the writer logs it and stops.
    """

    def __init__(self, storage: ReadingsStorage, readings: Channel[QueueItem]):
        self.storage = storage
        self.readings = readings
        self.state = WriterState.IDLE
        self.persisted_count = 0
        self.error: Optional[StoreWriteError] = None

    def open(self) -> None:
        """Open the store and make sure the schema exists.

        Raises:
            StoreInitializationError: If the store cannot be prepared.
        """
        try:
            self.storage.initialize()
        except sqlite3.Error as e:
            self.storage.close()
            raise StoreInitializationError(
                f"Could not initialize store at {self.storage.store_config.path}: {e}"
            ) from e
        self.state = WriterState.RUNNING

    def run(self) -> None:
        """Persist readings until the shutdown marker arrives.

        Raises:
            StoreWriteError: If an append fails.
        """
        if self.state is not WriterState.RUNNING:
            raise RuntimeError(f"Writer cannot run from state {self.state.name}")

        try:
            self._loop()
        finally:
            # Later sends from the sampler fail instead of piling up
            self.readings.close()
            self.storage.close()
            self.state = WriterState.STOPPED
            unprocessed = len(self.readings)
            if unprocessed:
                logger.warning(f"{unprocessed} queue entries left unprocessed")
            logger.info(f"Writer stopped after persisting {self.persisted_count} readings")

    def _loop(self) -> None:
        while True:
            try:
                item = self.readings.recv()
            except ChannelDisconnected:
                logger.warning("Reading queue closed without a shutdown marker")
                return

            if isinstance(item, ShutdownMarker):
                self.state = WriterState.DRAINING
                logger.info("Received shutdown marker, writer exiting")
                return

            try:
                self.storage.append(item)
            except sqlite3.Error as e:
                self.state = WriterState.FAILED
                logger.error(f"Saving to DB failed: {e}")
                self.error = StoreWriteError(f"Failed to store reading {item.value}: {e}")
                raise self.error from e
            self.persisted_count += 1
            logger.debug(f"Stored reading {item.value:.4f} at {item.timestamp_text()}")
