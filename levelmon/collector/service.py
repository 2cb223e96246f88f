"""Runs the sampler and writer threads and coordinates their shutdown."""

import logging
import signal
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from levelmon.shared.channel import Channel, ChannelDisconnected
from levelmon.shared.database import ReadingsStorage, StoreConfig
from levelmon.shared.models import QueueItem, ThreadMessage
from .config.settings import CollectionSettings
from .readers.base import SensorReader
from .readers.simulated import SimulatedReader
from .sampler import Sampler, StopReason
from .writer import ReadingWriter

logger = logging.getLogger(__name__)

SAMPLER_THREAD_NAME = "DataCollectionThread"
WRITER_THREAD_NAME = "DatabaseWriterThread"


@dataclass
class WorkerReport:
    """Outcome of one worker thread."""
    name: str
    error: Optional[BaseException] = None
    stop_reason: Optional[StopReason] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class CollectionService:
    """Owns one collection run: a sampler thread feeding a writer thread."""

    def __init__(
        self,
        settings: CollectionSettings,
        reader: Optional[SensorReader] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.reader = reader or SimulatedReader(settings.simulated_value)
        self.readings: Channel[QueueItem] = Channel("reading queue")
        self.termination: Channel[ThreadMessage] = Channel("termination requests")
        self.storage = ReadingsStorage(StoreConfig(path=settings.db_filename))
        self.writer = ReadingWriter(self.storage, self.readings)
        self.sampler = Sampler(settings, self.reader, self.readings, self.termination, sleep=sleep)

    def request_termination(self) -> None:
        """Ask the sampler to stop at its next poll point."""
        try:
            self.termination.send(ThreadMessage.TERMINATE)
        except ChannelDisconnected:
            logger.debug("Collection already finished, ignoring termination request")

    def _setup_signal_handlers(self):
        """Set up signal handlers for graceful shutdown."""
        def signal_handler(signum, frame):
            signame = signal.Signals(signum).name
            logger.info(f"Received {signame}, shutting down...")
            self.request_termination()

        signal.signal(signal.SIGTERM, signal_handler)
        signal.signal(signal.SIGINT, signal_handler)

    def _run_sampler(self, report: WorkerReport) -> None:
        try:
            report.stop_reason = self.sampler.run()
        except Exception as e:
            report.error = e
            logger.error(f"Data collection failed: {e}")

    def _run_writer(self, report: WorkerReport) -> None:
        try:
            self.writer.run()
        except Exception as e:
            report.error = e
            logger.error(f"Database writer failed: {e}")

    def run(self, install_signal_handlers: bool = True) -> List[WorkerReport]:
        """Run until both workers have finished.

        Args:
            install_signal_handlers: Route SIGINT/SIGTERM to a termination
                request. Ignored off the main thread.

        Returns:
            One report per worker, sampler first.

        Raises:
            StoreInitializationError: If the store cannot be prepared; no
                worker is started in that case.
        """
        self.writer.open()

        if install_signal_handlers and threading.current_thread() is threading.main_thread():
            self._setup_signal_handlers()

        sampler_report = WorkerReport(SAMPLER_THREAD_NAME)
        writer_report = WorkerReport(WRITER_THREAD_NAME)
        threads = [
            threading.Thread(target=self._run_writer, args=(writer_report,), name=WRITER_THREAD_NAME),
            threading.Thread(target=self._run_sampler, args=(sampler_report,), name=SAMPLER_THREAD_NAME),
        ]
        for thread in threads:
            thread.start()
        logger.info(
            f"Collecting {self.settings.samples_per_collection} samples every "
            f"{self.settings.millisec_between_readings} ms into {self.settings.db_filename}"
        )

        for thread in threads:
            thread.join()
        # Late signals become harmless no-ops
        self.termination.close()

        if sampler_report.stop_reason is StopReason.DISCONNECTED:
            logger.warning("Data collection stopped because its controller went away")
        logger.info(f"Collection finished, {self.writer.persisted_count} readings stored")
        return [sampler_report, writer_report]
