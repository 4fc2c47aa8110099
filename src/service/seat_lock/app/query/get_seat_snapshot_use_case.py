"""
Get Seat Snapshot Use Case
座位狀態快照查詢
"""

from typing import Optional

import anyio.to_thread

from src.platform.logging.loguru_io import Logger
from src.service.seat_lock.app.interface.i_seat_lock_manager import ISeatLockManager
from src.service.seat_lock.domain.seat_registry import SeatRegistry


class GetSeatSnapshotUseCase:
    def __init__(self, seat_lock_manager: ISeatLockManager):
        self.seat_lock_manager = seat_lock_manager

    @Logger.io(truncate_content=True)
    async def execute(self) -> Optional[SeatRegistry]:
        return await anyio.to_thread.run_sync(self.seat_lock_manager.get_snapshot)
