"""Database configuration and storage utilities."""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional

from .models import Reading

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS collections (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp DATETIME NOT NULL DEFAULT(STRFTIME('%Y-%m-%d %H:%M:%f', 'NOW')),
    reading REAL NOT NULL);
"""


@dataclass
class StoreConfig:
    """Local store configuration."""
    path: str
    timeout: float = 5.0


class ReadingsStorage:
    """Appends level readings to the SQLite collections table.

    The connection is opened by whichever thread calls initialize() and may
    then be handed to a single other thread for all further use.
    """

    def __init__(self, store_config: StoreConfig):
        """Initialize storage with store configuration.

        Args:
            store_config: Location and connection options for the store.
        """
        self.store_config = store_config
        self._connection: Optional[sqlite3.Connection] = None

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                self.store_config.path,
                timeout=self.store_config.timeout,
                check_same_thread=False,
            )
        return self._connection

    def initialize(self) -> None:
        """Open the store and create the collections table if it is missing.

        Safe to call on every startup.

        Raises:
            sqlite3.Error: If the store cannot be opened or the schema created.
        """
        conn = self._get_connection()
        conn.executescript(SCHEMA)
        conn.commit()
        logger.info(f"Store ready at {self.store_config.path}")

    def append(self, reading: Reading) -> int:
        """Insert one reading and commit it.

        Args:
            reading: The reading to store.

        Returns:
            Row id of the new record.

        Raises:
            sqlite3.Error: If the insert fails.
        """
        conn = self._get_connection()
        timestamp = reading.timestamp_text()
        if timestamp is None:
            cur = conn.execute(
                "INSERT INTO collections (reading) VALUES (?)", (reading.value,)
            )
        else:
            cur = conn.execute(
                "INSERT INTO collections (timestamp, reading) VALUES (?, ?)",
                (timestamp, reading.value),
            )
        conn.commit()
        return cur.lastrowid

    def close(self):
        """Close the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
