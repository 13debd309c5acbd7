"""
Unit tests for the read-only storage reader.
"""

import sqlite3
import threading

import pytest

from teapot_fortune.core.models_io import Entry
from teapot_fortune.storage.reader import StorageReader, StorageUnavailable


class TestMaxIdentifier:
    """Tests for StorageReader.max_identifier()."""

    def test_returns_real_maximum(self, sparse_storage):
        assert sparse_storage.max_identifier() == 9

    def test_empty_table_uses_fallback(self, empty_db):
        storage = StorageReader(empty_db, fallback_max_id=1234)
        try:
            assert storage.max_identifier() == 1234
        finally:
            storage.close()

    def test_missing_table_uses_fallback(self, tmp_path):
        path = tmp_path / "no_table.sqlite"
        sqlite3.connect(path).close()

        storage = StorageReader(path, fallback_max_id=77)
        try:
            assert storage.max_identifier() == 77
        finally:
            storage.close()

    def test_missing_file_uses_default_fallback(self, tmp_path):
        storage = StorageReader(tmp_path / "absent.sqlite")
        assert storage.max_identifier() == 388800
        assert not (tmp_path / "absent.sqlite").exists()


class TestFetchById:
    """Tests for StorageReader.fetch_by_id()."""

    def test_hit(self, sparse_storage):
        assert sparse_storage.fetch_by_id(5) == Entry(id=5, body="<p>five</p>")

    @pytest.mark.parametrize("entry_id", [0, 2, 8, 10, -1])
    def test_gap_is_absent(self, sparse_storage, entry_id):
        assert sparse_storage.fetch_by_id(entry_id) is None

    def test_read_failure_is_absent(self, tmp_path):
        storage = StorageReader(tmp_path / "absent.sqlite")
        assert storage.fetch_by_id(1) is None

    def test_body_is_returned_verbatim(self, make_db):
        body = "<b>bold</b> & {braces} ☕"
        storage = StorageReader(make_db({3: body}))
        try:
            assert storage.fetch_by_id(3).body == body
        finally:
            storage.close()


class TestReadOnly:
    """The reader must never modify the store."""

    def test_connection_rejects_writes(self, sparse_storage):
        sparse_storage.check()
        with pytest.raises(sqlite3.OperationalError):
            with sparse_storage._connection() as conn:
                conn.execute("DELETE FROM copypastas")

    def test_check_on_missing_file_raises(self, tmp_path):
        with pytest.raises(StorageUnavailable):
            StorageReader(tmp_path / "absent.sqlite").check()


class TestConcurrency:
    """Tests for concurrent access from worker threads."""

    def test_parallel_reads(self, sparse_storage):
        results = []
        errors = []

        def worker():
            try:
                for _ in range(50):
                    results.append((sparse_storage.max_identifier(), sparse_storage.fetch_by_id(9)))
            except Exception as e:  # pragma: no cover - surfaced below
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(results) == 250
        assert all(max_id == 9 and entry.id == 9 for max_id, entry in results)

    def test_pool_is_bounded_across_thread_churn(self, sparse_db):
        storage = StorageReader(sparse_db, pool_size=3)
        try:
            for _ in range(20):
                t = threading.Thread(target=storage.max_identifier)
                t.start()
                t.join()
            assert storage.open_connections == 1

            for _ in range(10):
                burst = [threading.Thread(target=storage.fetch_by_id, args=(5,)) for _ in range(8)]
                for t in burst:
                    t.start()
                for t in burst:
                    t.join()
                assert storage.open_connections <= 3
        finally:
            storage.close()

        assert storage.open_connections == 0

    def test_more_threads_than_connections(self, sparse_db):
        storage = StorageReader(sparse_db, pool_size=1)
        results = []
        threads = [
            threading.Thread(target=lambda: results.append(storage.fetch_by_id(1)))
            for _ in range(6)
        ]
        try:
            for t in threads:
                t.start()
            for t in threads:
                t.join()
        finally:
            storage.close()

        assert [entry.id for entry in results] == [1] * 6
        assert storage.open_connections == 0

    def test_failed_open_does_not_consume_pool(self, tmp_path):
        storage = StorageReader(tmp_path / "absent.sqlite", pool_size=1)

        assert storage.fetch_by_id(1) is None
        assert storage.max_identifier() == 388800
        assert storage.open_connections == 0
