"""Command-line entry point: `python -m teapot_fortune`.

Resolves configuration, verifies the database can be opened, then serves
the app with uvicorn on all interfaces.
"""

import logging
import sys

import uvicorn

from .core.config import load_config
from .main import create_app
from .storage.reader import StorageReader, StorageUnavailable

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HOST = "0.0.0.0"

logger = logging.getLogger("teapot_fortune")


def main() -> int:
    logging.basicConfig(format=LOG_FORMAT, level=logging.INFO)

    config = load_config()
    logging.getLogger().setLevel(config.log_level)

    storage = StorageReader(
        config.storage_location,
        fallback_max_id=config.fallback_max_id,
        pool_size=config.workers,
    )
    try:
        storage.check()
    except StorageUnavailable as e:
        logger.error("%s", e)
        return 1

    logger.info(
        "Serving %s on %s:%d with status %d",
        config.storage_location, HOST, config.listen_port, config.status_code,
    )
    uvicorn.run(
        create_app(config, storage),
        host=HOST,
        port=config.listen_port,
        log_level=config.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
