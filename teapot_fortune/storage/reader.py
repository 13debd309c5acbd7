"""Read-only access to the copypasta store.

The store is a single SQLite table `copypastas(id, body)` populated by an
external process. Ids are sparse: rows can be deleted without compaction, so
a lookup for any given id may legitimately miss.
"""

import logging
import queue
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from ..core.models_io import DEFAULT_FALLBACK_MAX_ID, DEFAULT_WORKERS, Entry

logger = logging.getLogger(__name__)

TABLE = "copypastas"
MAX_ID_QUERY = f"SELECT max(id) AS id FROM {TABLE};"
FETCH_QUERY = f"SELECT id, body FROM {TABLE} WHERE id = ?;"


class StorageUnavailable(Exception):
    """The database file cannot be opened read-only."""


class StorageReader:
    """
    Thread-safe reader over the copypasta table.

    Holds at most `pool_size` read-only connections, opened on demand and
    shared by whichever worker threads are running; a thread checks one out
    for the duration of a single query. All reads fail open (sentinel bound
    or `None`) rather than raising into the request path.
    """

    def __init__(
        self,
        path: Union[str, Path],
        fallback_max_id: int = DEFAULT_FALLBACK_MAX_ID,
        pool_size: int = DEFAULT_WORKERS,
    ):
        self.path = Path(path)
        self.fallback_max_id = fallback_max_id
        self.pool_size = pool_size
        self._pool: "queue.Queue[sqlite3.Connection]" = queue.Queue()
        self._opened = 0
        self._lock = threading.Lock()

    @property
    def open_connections(self) -> int:
        return self._opened

    def _connect(self) -> sqlite3.Connection:
        # mode=ro never creates the file and rejects writes
        uri = f"{self.path.resolve().as_uri()}?mode=ro"
        return sqlite3.connect(uri, uri=True, timeout=5, check_same_thread=False)

    def _checkout(self) -> sqlite3.Connection:
        try:
            return self._pool.get_nowait()
        except queue.Empty:
            pass
        with self._lock:
            grow = self._opened < self.pool_size
            if grow:
                self._opened += 1
        if not grow:
            return self._pool.get()
        try:
            return self._connect()
        except sqlite3.Error:
            with self._lock:
                self._opened -= 1
            raise

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._checkout()
        try:
            yield conn
        finally:
            self._pool.put(conn)

    def check(self) -> None:
        """
        Open a connection and run the max-id query once.

        Raises:
            StorageUnavailable: if the file cannot be opened or queried
        """
        try:
            with self._connection() as conn:
                conn.execute(MAX_ID_QUERY).fetchone()
        except sqlite3.Error as e:
            raise StorageUnavailable(f"Failed to open sqlite database {self.path}: {e}") from e

    def max_identifier(self) -> int:
        """
        Largest id currently in the table.

        Returns:
            max(id), or `fallback_max_id` if the table is empty or the query fails
        """
        try:
            with self._connection() as conn:
                row = conn.execute(MAX_ID_QUERY).fetchone()
        except sqlite3.Error as e:
            logger.debug("max(id) query failed, using fallback %d: %s", self.fallback_max_id, e)
            return self.fallback_max_id
        if row is None or row[0] is None:
            return self.fallback_max_id
        try:
            return int(row[0])
        except (TypeError, ValueError):
            return self.fallback_max_id

    def fetch_by_id(self, entry_id: int) -> Optional[Entry]:
        """
        Look up a single entry.

        Args:
            entry_id: Identifier to fetch

        Returns:
            The entry, or None when the id is absent or the read fails
        """
        try:
            with self._connection() as conn:
                row = conn.execute(FETCH_QUERY, (int(entry_id),)).fetchone()
        except sqlite3.Error as e:
            logger.debug("Lookup of id %d failed: %s", entry_id, e)
            return None
        if row is None:
            return None
        entry_id, body = row
        if body is None:
            return None
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        return Entry(id=entry_id, body=str(body))

    def close(self) -> None:
        """Close every idle pooled connection."""
        while True:
            try:
                conn = self._pool.get_nowait()
            except queue.Empty:
                break
            conn.close()
            with self._lock:
                self._opened -= 1
