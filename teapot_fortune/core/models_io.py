"""Pydantic models shared across the service.

These are immutable once built: the resolved configuration is constructed
once at startup and read concurrently by every request handler, and entries
are read-only views of rows in the copypasta store.
"""

from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_STATUS_CODE = 418
DEFAULT_STORAGE_LOCATION = "./data/copypastas.sqlite"
DEFAULT_LISTEN_PORT = 6757

# Historical size of the copypasta table. Deliberately at least as large as
# the live population so sampling below it still hits most of the time when
# the max(id) query cannot be answered.
DEFAULT_FALLBACK_MAX_ID = 388800
DEFAULT_MAX_ATTEMPTS = 10000
DEFAULT_SELECTION_TIMEOUT = 5.0
DEFAULT_WORKERS = 5
DEFAULT_LOG_LEVEL = "INFO"


class Entry(BaseModel):
    """One stored text record. Ids are unique but may have gaps."""
    model_config = ConfigDict(frozen=True)

    id: int
    body: str  # Trusted markup, rendered verbatim


class ResolvedConfig(BaseModel):
    """
    Process-wide settings, resolved once from the environment.

    The first three fields come from `RESPONSE_CODE`, `DATABASE_URL` and
    `TEAPOT_FORTUNE_PORT`; the rest are tuning knobs for selection and the
    server shell.
    """
    model_config = ConfigDict(frozen=True)

    status_code: int = Field(DEFAULT_STATUS_CODE, ge=100, le=599, description="Status for every response")
    storage_location: Path = Field(Path(DEFAULT_STORAGE_LOCATION), description="SQLite database file")
    listen_port: int = Field(DEFAULT_LISTEN_PORT, ge=0, le=65535, description="TCP port to bind")

    fallback_max_id: int = Field(DEFAULT_FALLBACK_MAX_ID, ge=1, description="Sampling bound when max(id) is unavailable")
    max_attempts: int = Field(DEFAULT_MAX_ATTEMPTS, ge=1, description="Lookups per request before giving up")
    selection_timeout: float = Field(DEFAULT_SELECTION_TIMEOUT, gt=0, description="Seconds per request before giving up")
    workers: int = Field(DEFAULT_WORKERS, ge=1, description="Worker threads serving requests")
    log_level: str = DEFAULT_LOG_LEVEL
