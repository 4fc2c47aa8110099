"""
Seat Lock Service - FastAPI Application
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config import di
from src.platform.logging.loguru_io import Logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Seat Lock Service] Starting up...')

    di.setup()
    settings = di.container.config_service()
    Logger.base.info(
        f'🪑 [Seat Lock Service] Seat grid ready ({settings.SEAT_ROWS}x{settings.SEAT_COLS}, '
        f'backend={settings.SEAT_STATE_BACKEND})'
    )

    Logger.base.info('✅ [Seat Lock Service] Startup complete')

    yield

    Logger.base.info('🛑 [Seat Lock Service] Shutting down...')
    di.cleanup()
    Logger.base.info('👋 [Seat Lock Service] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root():
    return RedirectResponse(url='/docs')


if __name__ == '__main__':
    import uvicorn

    uvicorn.run('src.main:app', host='0.0.0.0', port=8000)
