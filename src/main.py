"""
Production FastAPI Application

Ticket exchange API with the lifecycle event task group and, when configured,
the Kvrocks document store.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.platform.state.kvrocks_client import kvrocks_client
from src.platform.state.lua_script_executor import lua_script_executor


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Exchange] Starting up...')

    tracing = TracingConfig(service_name=settings.OTEL_SERVICE_NAME)
    tracing.setup()
    Logger.base.info('📊 [Exchange] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Exchange] Dependency injection wired')

    use_kvrocks = settings.EXCHANGE_STORE_BACKEND == 'kvrocks'
    if use_kvrocks:
        tracing.instrument_redis()
        # Fail fast when Kvrocks is unreachable
        client = await kvrocks_client.initialize()
        await lua_script_executor.initialize(client=client)
        Logger.base.info('📡 [Exchange] Kvrocks initialized, Lua scripts loaded')
    else:
        Logger.base.info('🗂️  [Exchange] Using the in-memory document store')

    # Task group for fire-and-forget lifecycle side effects
    async with anyio.create_task_group() as tg:
        container.task_group.override(tg)
        Logger.base.info('✅ [Exchange] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Exchange] Shutting down...')
        container.task_group.reset_override()
        tg.cancel_scope.cancel()

    if use_kvrocks:
        await kvrocks_client.disconnect()
        Logger.base.info('📡 [Exchange] Kvrocks disconnected')

    tracing.shutdown()
    container.unwire()

    Logger.base.info('👋 [Exchange] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
