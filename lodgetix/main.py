"""
Production FastAPI Application

Reservation orchestration, session management and catalog reads, with the
PostgreSQL row-change feed and Kvrocks presence running in the background.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from lodgetix.platform.app_factory import create_app
from lodgetix.platform.config.di import container
from lodgetix.platform.config.wire_modules import WIRE_MODULES
from lodgetix.platform.database.asyncpg_setting import close_asyncpg_pool, get_asyncpg_pool
from lodgetix.platform.database.orm_db_setting import dispose_engine, get_engine
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.platform.observability.tracing import TracingConfig
from lodgetix.platform.state.kvrocks_client import kvrocks_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    Logger.base.info('🚀 [LodgeTix] Starting up...')

    tracing = TracingConfig(service_name='lodgetix-service')
    tracing.setup()
    Logger.base.info('📊 [LodgeTix] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [LodgeTix] Dependency injection wired')

    engine = get_engine()
    tracing.instrument_sqlalchemy(engine=engine)
    tracing.instrument_redis()
    Logger.base.info('🗄️  [LodgeTix] Database engine ready + instrumented')

    # Fail-fast
    await kvrocks_client.initialize()
    Logger.base.info('📡 [LodgeTix] Kvrocks initialized')

    await get_asyncpg_pool()
    Logger.base.info('🏊 [LodgeTix] Asyncpg pool initialized')

    row_change_feed = container.row_change_feed()
    await row_change_feed.start()
    Logger.base.info('🐘 [LodgeTix] Row-change feed started')

    registry = container.orchestrator_registry()
    idle_sweep = asyncio.create_task(registry.run_idle_sweep())
    Logger.base.info('🧹 [LodgeTix] Idle client sweep started')

    Logger.base.info('✅ [LodgeTix] All services initialized')

    yield

    Logger.base.info('🛑 [LodgeTix] Shutting down...')

    idle_sweep.cancel()
    try:
        await idle_sweep
    except asyncio.CancelledError:
        pass
    await registry.dispose_all()
    await row_change_feed.stop()

    await close_asyncpg_pool()
    await dispose_engine()

    await kvrocks_client.disconnect()

    tracing.shutdown()
    container.unwire()

    Logger.base.info('👋 [LodgeTix] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    return RedirectResponse(url='/docs')
