"""Storage access for the copypasta collection.

The `reader.py` module wraps the read-only SQLite table and exposes the
two queries the selector needs: the maximum id and a point lookup by id.
"""

from .reader import StorageReader, StorageUnavailable

__all__ = ["StorageReader", "StorageUnavailable"]
