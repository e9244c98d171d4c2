"""
Response cache for notionrecords.

This module stores decoded API responses in DuckDB, keyed by a caller-supplied
string, with a fixed time-to-live applied when a value is stored.
"""

import duckdb
import json
import logging
import time
from typing import Any, Callable, Optional

from ..config import CACHE_DISABLED
from ..errors import ConfigurationError


class ResponseCache:
    """
    Key/value store of decoded JSON responses with expiry.

    A lifetime of 0 keeps entries forever; CACHE_DISABLED (-1) turns the cache
    into a pass-through that never touches the database.
    """

    def __init__(self, db_path: str = ":memory:", lifetime: int = 0,
                 clock: Callable[[], float] = time.time):
        """
        Initialize the response cache.

        Args:
            db_path: Path to the DuckDB database file, or ":memory:"
            lifetime: Time-to-live in seconds for stored entries
            clock: Source of the current time, in seconds since epoch
        """
        if lifetime < CACHE_DISABLED:
            raise ConfigurationError(f"Invalid cache lifetime: {lifetime}")

        self.db_path = db_path
        self.lifetime = lifetime
        self.clock = clock
        self.connection = None

    @property
    def enabled(self) -> bool:
        return self.lifetime != CACHE_DISABLED

    def connect(self):
        """Establish connection to the database and create the cache table."""
        if not self.enabled or self.connection:
            return
        self.connection = duckdb.connect(self.db_path)
        self.initialize_database()

    def disconnect(self):
        """Close the database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def initialize_database(self):
        """
        Create the cache table if it doesn't exist.
        """
        if not self.connection:
            raise RuntimeError("Cache connection not established")

        self.connection.execute("""
            CREATE TABLE IF NOT EXISTS response_cache (
                cache_key VARCHAR PRIMARY KEY,
                payload TEXT NOT NULL,
                stored_at DOUBLE NOT NULL,
                expires_at DOUBLE
            )
        """)

    def _require_connection(self):
        if not self.connection:
            raise RuntimeError("Cache connection not established")

    def get(self, key: str, compute: Callable[[], Any]) -> Any:
        """
        Return the cached value for key, computing and storing it when absent.

        Args:
            key: The cache key
            compute: Called to produce the value on a miss

        Returns:
            The cached or freshly computed value
        """
        if not self.enabled:
            return compute()

        self._require_connection()

        row = self.connection.execute("""
            SELECT payload, expires_at FROM response_cache WHERE cache_key = ?
        """, [key]).fetchone()

        if row:
            payload, expires_at = row
            if expires_at is None or expires_at > self.clock():
                logging.debug(f"Cache hit for {key}")
                return json.loads(payload)
            logging.debug(f"Cache entry expired for {key}")

        logging.debug(f"Cache miss for {key}")
        value = compute()
        self.set(key, value)
        return value

    def has(self, key: str) -> bool:
        """Check whether an unexpired entry exists for key."""
        if not self.enabled:
            return False

        self._require_connection()

        row = self.connection.execute("""
            SELECT expires_at FROM response_cache WHERE cache_key = ?
        """, [key]).fetchone()
        return bool(row) and (row[0] is None or row[0] > self.clock())

    def set(self, key: str, value: Any) -> None:
        """
        Store a value under key with the configured lifetime.

        Args:
            key: The cache key
            value: A JSON-serializable value
        """
        if not self.enabled:
            return

        self._require_connection()

        now = self.clock()
        expires_at = now + self.lifetime if self.lifetime > 0 else None
        self.connection.execute("""
            INSERT OR REPLACE INTO response_cache (cache_key, payload, stored_at, expires_at)
            VALUES (?, ?, ?, ?)
        """, [key, json.dumps(value), now, expires_at])
        logging.debug(f"Cached response under {key}")

    def delete(self, key: str) -> None:
        """Remove the entry for key, if any."""
        if not self.enabled:
            return

        self._require_connection()
        self.connection.execute("DELETE FROM response_cache WHERE cache_key = ?", [key])

    def clear(self) -> None:
        """Remove every cached entry."""
        if not self.enabled:
            return

        self._require_connection()
        self.connection.execute("DELETE FROM response_cache")
        logging.info("Response cache cleared")

    def purge_expired(self) -> int:
        """
        Delete expired entries.

        Returns:
            The number of entries removed
        """
        if not self.enabled:
            return 0

        self._require_connection()

        now = self.clock()
        count = self.connection.execute("""
            SELECT COUNT(*) FROM response_cache
            WHERE expires_at IS NOT NULL AND expires_at <= ?
        """, [now]).fetchone()[0]
        self.connection.execute("""
            DELETE FROM response_cache
            WHERE expires_at IS NOT NULL AND expires_at <= ?
        """, [now])

        if count:
            logging.info(f"Purged {count} expired cache entries")
        return count

    def count(self) -> int:
        """Return the number of stored entries, expired or not."""
        if not self.enabled:
            return 0

        self._require_connection()
        return self.connection.execute("SELECT COUNT(*) FROM response_cache").fetchone()[0]


def create_cache(db_path: Optional[str], lifetime: int) -> ResponseCache:
    """Build and connect a ResponseCache."""
    cache = ResponseCache(db_path or ":memory:", lifetime)
    cache.connect()
    return cache
