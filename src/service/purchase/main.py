"""
Purchase Service - Main Application
Handles ticket transactions and coupon redemption.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


SERVICE_NAME = 'purchase-service'


@asynccontextmanager
async def lifespan(app: FastAPI):
    Logger.base.info('🚀 [Purchase Service] Starting up...')

    # Setup OpenTelemetry tracing
    tracing = TracingConfig(service_name=SERVICE_NAME)
    tracing.setup()
    database = container.database()
    tracing.instrument_sqlalchemy(engine=database.engine)
    Logger.base.info('📊 [Purchase Service] OpenTelemetry tracing configured')

    # Wire dependency injection for use cases and controllers
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Purchase Service] Dependency injection wired')

    Logger.base.info('✅ [Purchase Service] Startup complete')

    yield

    Logger.base.info('🛑 [Purchase Service] Shutting down...')

    await database.dispose()
    Logger.base.info('🗄️ [Purchase Service] Database engine disposed')

    # Shutdown tracing (flush remaining spans)
    tracing.shutdown()

    container.unwire()
    Logger.base.info('👋 [Purchase Service] Shutdown complete')


app = create_app(lifespan=lifespan, service_name=SERVICE_NAME)
