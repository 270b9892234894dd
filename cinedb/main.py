# cinedb/main.py

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI
from testcontainers.postgres import PostgresContainer

from cinedb.api.errors import register_error_handlers
from cinedb.api.routers import healthcheck, movies
from cinedb.core.config import VERSION, Settings, get_settings
from cinedb.core.db import asyncpg_dsn, close_pool, ensure_schema, open_pool
from cinedb.core.logger import set_level, setup_logger
from cinedb.core.store import Models, new_models

logger = setup_logger("cinedb")


async def _start_container(settings: Settings):
    """Launch a throwaway PostgreSQL container; returns (container, dsn)."""
    container = PostgresContainer(image=settings.testcontainers_image)
    await asyncio.to_thread(container.start)
    dsn = asyncpg_dsn(container.get_connection_url())
    logger.info("Started test Postgres container: %s", dsn)
    return container, dsn


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Models handed in by the caller (tests, mock mode): no database at all
    if app.state.models is not None:
        yield
        return

    settings: Settings = app.state.settings
    db_cfg = settings.db
    container = None

    # 1) Optionally launch a PostgreSQL Docker container
    if settings.enable_testcontainers:
        try:
            container, dsn = await _start_container(settings)
            db_cfg = db_cfg.model_copy(update={"dsn": dsn})
        except Exception as e:
            logger.warning("Testcontainers unavailable (%s); falling back to db.dsn", e)

    # 2) Pool + schema
    pool = await open_pool(db_cfg)
    try:
        await ensure_schema(pool)
        app.state.models = new_models(pool, timeout=db_cfg.query_timeout)
        yield
    finally:
        app.state.models = None
        await close_pool(pool)
        if container is not None:
            try:
                await asyncio.to_thread(container.stop)
                logger.info("Stopped test Postgres container")
            except Exception:
                logger.exception("Error stopping test Postgres container")


def create_app(settings: Optional[Settings] = None, models: Optional[Models] = None) -> FastAPI:
    """
    Build the API. `settings` defaults to get_settings(); passing `models`
    bypasses the database so handlers run against whatever store is given.
    """
    settings = settings or get_settings()
    set_level(settings.log_level)

    app = FastAPI(title="cinedb", version=VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.models = models

    register_error_handlers(app)

    api_v1 = APIRouter(prefix="/v1")
    api_v1.include_router(healthcheck.router)
    api_v1.include_router(movies.router, prefix="/movies")
    app.include_router(api_v1)
    return app


app = create_app()
