"""
Initialize Seat Registry Use Case
座位登記表初始化用例
"""

from functools import partial

import anyio.to_thread

from src.platform.logging.loguru_io import Logger
from src.service.seat_lock.app.dto import SeatGridRequest
from src.service.seat_lock.app.interface.i_seat_lock_manager import ISeatLockManager
from src.service.seat_lock.domain.seat_registry import SeatRegistry


class InitializeSeatRegistryUseCase:
    """Create the seat grid once; later calls leave live state untouched"""

    def __init__(self, seat_lock_manager: ISeatLockManager):
        self.seat_lock_manager = seat_lock_manager

    @Logger.io
    async def execute(self, request: SeatGridRequest) -> SeatRegistry:
        Logger.base.info(f'🪑 [INIT-SEATS] Ensuring {request.rows}x{request.cols} seat grid')
        return await anyio.to_thread.run_sync(
            partial(self.seat_lock_manager.initialize, rows=request.rows, cols=request.cols)
        )


class ResetSeatRegistryUseCase:
    """Discard all locks and bookings and start from an empty grid"""

    def __init__(self, seat_lock_manager: ISeatLockManager):
        self.seat_lock_manager = seat_lock_manager

    @Logger.io
    async def execute(self, request: SeatGridRequest) -> SeatRegistry:
        Logger.base.info(f'♻️ [RESET-SEATS] Resetting to {request.rows}x{request.cols} seat grid')
        return await anyio.to_thread.run_sync(
            partial(self.seat_lock_manager.reset, rows=request.rows, cols=request.cols)
        )
