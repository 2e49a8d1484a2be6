from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from app.api.cache_admin import router as cache_admin_router
from app.api.entries import router as entries_router
from app.config.settings import Settings, settings as default_settings
from app.core.exceptions.exceptions import PaginationValidationError, StoreError
from app.jobs.scheduler import add_sweep_job, build_scheduler, shutdown_scheduler, start_scheduler
from app.services.store_adapter import BaseStoreAdapter, SQLStoreAdapter
from app.services.streaming import INTERNAL_ERROR_BODY
from app.services.ttl_cache import TTLCache
from app.utils.log import app_logger


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[BaseStoreAdapter] = None,
    cache: Optional[TTLCache] = None,
) -> FastAPI:
    """Build the application with its own cache and store.

    Both are created from `settings` unless given, and live on `app.state`
    for the dependencies in `app.api.deps`.
    """
    settings = settings or default_settings
    if store is None:
        from app.services.database import engine
        store = SQLStoreAdapter(engine, batch_size=settings.SCAN_BATCH_SIZE)
    if cache is None:
        cache = TTLCache(ttl_seconds=settings.cache_ttl_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup logic
        store.init_schema()
        scheduler = None
        if settings.sweep_enabled:
            scheduler = build_scheduler()
            add_sweep_job(scheduler, cache, settings.sweep_interval_seconds)
            start_scheduler(scheduler)
        else:
            app_logger.info("scheduler: cache sweep disabled", app_env=settings.APP_ENV)
        app.state.scheduler = scheduler
        yield
        # Shutdown logic
        if scheduler is not None:
            shutdown_scheduler(scheduler)
        cache.clear()

    app = FastAPI(title="kvstream", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.cache = cache
    app.state.scheduler = None

    if settings.cors_origin_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origin_list,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
            expose_headers=["X-Cache", "X-Cache-Key"],
            max_age=86400,
        )

    @app.exception_handler(PaginationValidationError)
    async def pagination_error_handler(request: Request, exc: PaginationValidationError):
        return JSONResponse(status_code=400, content={"errors": exc.errors})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        # cause stays in the logs, the client gets a generic body
        app_logger.error("api.store_error", path=request.url.path, operation=exc.operation, error=exc.detail)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)

    # include routes
    app.include_router(entries_router)
    app.include_router(cache_admin_router)

    return app


app = create_app()


def main():
    app_logger.info("server: starting", host=default_settings.HOST, port=default_settings.PORT)
    uvicorn.run("app.main:app", host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    main()
