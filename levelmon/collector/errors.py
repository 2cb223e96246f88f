"""Errors raised by the data collection pipeline."""


class CollectionError(Exception):
    """Base class for data collection failures."""

    pass


class ConfigurationError(CollectionError):
    """Settings are missing or invalid; nothing has been started."""

    pass


class FatalSamplingError(CollectionError):
    """The sampler cannot continue (unsupported sensor, bad sample count, writer gone)."""

    pass


class StoreInitializationError(CollectionError):
    """The store could not be opened or its schema created."""

    pass


class StoreWriteError(CollectionError):
    """Appending a reading to the store failed."""

    pass
