"""
pytest configuration and fixtures.
"""

import sqlite3
from pathlib import Path
from typing import Callable, Dict

import numpy as np
import pytest

from teapot_fortune.core.models_io import ResolvedConfig
from teapot_fortune.storage.reader import StorageReader


SPARSE_ENTRIES = {
    1: "<p>one</p>",
    5: "<p>five</p>",
    9: "<p>nine</p>",
}


def _write_db(path: Path, entries: Dict[int, str]) -> Path:
    conn = sqlite3.connect(path)
    try:
        conn.execute("CREATE TABLE copypastas (id INTEGER PRIMARY KEY, body TEXT NOT NULL)")
        conn.executemany("INSERT INTO copypastas (id, body) VALUES (?, ?)", entries.items())
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def make_db(tmp_path: Path) -> Callable[[Dict[int, str]], Path]:
    """Factory writing a copypasta database with the given rows."""
    counter = iter(range(1000))

    def factory(entries: Dict[int, str]) -> Path:
        return _write_db(tmp_path / f"copypastas-{next(counter)}.sqlite", entries)

    return factory


@pytest.fixture
def sparse_entries() -> Dict[int, str]:
    """Rows stored in the sparse database, keyed by id."""
    return dict(SPARSE_ENTRIES)


@pytest.fixture
def sparse_db(make_db) -> Path:
    """Database with ids {1, 5, 9}."""
    return make_db(SPARSE_ENTRIES)


@pytest.fixture
def empty_db(make_db) -> Path:
    """Database with the table but no rows."""
    return make_db({})


@pytest.fixture
def sparse_storage(sparse_db: Path):
    storage = StorageReader(sparse_db, fallback_max_id=10)
    yield storage
    storage.close()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def config(sparse_db: Path) -> ResolvedConfig:
    """Config pointing at the sparse database with a tight selection budget."""
    return ResolvedConfig(
        status_code=418,
        storage_location=sparse_db,
        listen_port=0,
        max_attempts=2000,
        selection_timeout=5.0,
    )


ENV_VARS = (
    "RESPONSE_CODE",
    "DATABASE_URL",
    "TEAPOT_FORTUNE_PORT",
    "TEAPOT_FORTUNE_FALLBACK_MAX_ID",
    "TEAPOT_FORTUNE_MAX_ATTEMPTS",
    "TEAPOT_FORTUNE_TIMEOUT",
    "TEAPOT_FORTUNE_WORKERS",
    "TEAPOT_FORTUNE_LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every service variable; anything a test (or .env) sets is undone afterwards."""
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch
