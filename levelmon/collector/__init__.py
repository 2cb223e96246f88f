"""Level sensor data collection service."""

from .sampler import Sampler, StopReason, take_collection
from .service import CollectionService, WorkerReport
from .writer import ReadingWriter, WriterState


def main():
    """Entry point for collector service."""
    import logging
    import sys

    from .config.settings import load_config
    from .errors import ConfigurationError, StoreInitializationError
    from levelmon.shared.logging import setup_logging

    logger = logging.getLogger(__name__)

    try:
        config = load_config()
    except ConfigurationError as e:
        setup_logging()
        logger.error(f"Configuration failed: {e}")
        sys.exit(1)

    setup_logging(config.log_level)

    service = CollectionService(config.data_collection)
    try:
        reports = service.run()
    except StoreInitializationError as e:
        logger.error(f"Store initialization failed: {e}")
        sys.exit(1)

    failed = [report for report in reports if report.failed]
    for report in failed:
        logger.error(f"{report.name} failed: {report.error}")
    sys.exit(1 if failed else 0)


__all__ = [
    "CollectionService",
    "ReadingWriter",
    "Sampler",
    "StopReason",
    "WorkerReport",
    "WriterState",
    "take_collection",
    "main",
]
