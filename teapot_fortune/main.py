"""App factory and ASGI entrypoint for the Teapot Fortune service.

- Serves one catch-all route returning a random copypasta as HTML
- Compresses responses with gzip when the client accepts it
- Marks every response uncacheable for both CDNs and clients
- Caps the worker thread pool that runs the blocking storage reads
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import anyio.to_thread
from fastapi import FastAPI, Request
from starlette.middleware.gzip import GZipMiddleware

from .core.config import resolve_config
from .core.document import build_no_content_response
from .core.models_io import ResolvedConfig
from .routers import fortune
from .selection.selector import FortuneSelector, NoContentAvailable
from .storage.reader import StorageReader

logger = logging.getLogger(__name__)

NO_STORE_HEADERS = {
    "Cache-Control": "no-store",
    "CDN-Cache-Control": "no-store",
}


def create_app(
    config: Optional[ResolvedConfig] = None,
    storage: Optional[StorageReader] = None,
    selector: Optional[FortuneSelector] = None,
) -> FastAPI:
    if config is None:
        config = resolve_config()
    if storage is None:
        storage = StorageReader(
            config.storage_location,
            fallback_max_id=config.fallback_max_id,
            pool_size=config.workers,
        )
    if selector is None:
        selector = FortuneSelector(
            storage,
            max_attempts=config.max_attempts,
            timeout=config.selection_timeout,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Cap the thread pool running the sync catch-all handler
        anyio.to_thread.current_default_thread_limiter().total_tokens = config.workers
        try:
            yield
        finally:
            storage.close()

    # No docs/openapi routes: the catch-all owns every path
    app = FastAPI(
        title="Teapot Fortune",
        version="1.0.0",
        description="Random copypastas served with a configurable status code",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    # Shared, read-only server state
    app.state.config = config
    app.state.storage = storage
    app.state.selector = selector

    # Empty bodies (204/304) must stay uncompressed and empty
    app.add_middleware(GZipMiddleware, minimum_size=1)

    @app.middleware("http")
    async def no_store_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(NO_STORE_HEADERS)
        return response

    @app.exception_handler(NoContentAvailable)
    async def no_content_available(request: Request, exc: NoContentAvailable):
        logger.warning("%s (path=%s)", exc, request.url.path)
        return build_no_content_response()

    # Appended directly: include_router would rebuild it with an explicit method list
    app.router.routes.append(fortune.route)

    return app
