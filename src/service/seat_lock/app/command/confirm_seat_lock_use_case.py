"""
Confirm Seat Lock Use Case
座位確認訂購用例
"""

from functools import partial

import anyio.to_thread

from src.platform.logging.loguru_io import Logger
from src.service.seat_lock.app.dto import SeatLockRequest
from src.service.seat_lock.app.interface.i_seat_lock_manager import ISeatLockManager
from src.service.seat_lock.domain.lock_result import LockResult


class ConfirmSeatLockUseCase:
    """Turn a held lock into a booking"""

    def __init__(self, seat_lock_manager: ISeatLockManager):
        self.seat_lock_manager = seat_lock_manager

    @Logger.io
    async def execute(self, request: SeatLockRequest) -> LockResult:
        result = await anyio.to_thread.run_sync(
            partial(
                self.seat_lock_manager.confirm_lock,
                holder_id=request.holder_id,
                seat_id=request.seat_id,
            )
        )

        if result.ok:
            Logger.base.info(f'✅ [CONFIRM-LOCK] {request.holder_id} booked {request.seat_id}')
        else:
            # Expired, never held, or held by someone else all land here
            Logger.base.info(
                f'⛔ [CONFIRM-LOCK] {request.holder_id} could not book {request.seat_id}: '
                f'{result.error_kind}'
            )
        return result
