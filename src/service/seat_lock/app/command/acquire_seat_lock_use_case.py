"""
Acquire Seat Lock Use Case
座位鎖定用例
"""

from functools import partial

import anyio.to_thread

from src.platform.logging.loguru_io import Logger
from src.service.seat_lock.app.dto import AcquireSeatLockRequest
from src.service.seat_lock.app.interface.i_seat_lock_manager import ISeatLockManager
from src.service.seat_lock.domain.lock_result import LockResult


class AcquireSeatLockUseCase:
    """座位鎖定用例"""

    def __init__(self, seat_lock_manager: ISeatLockManager, default_ttl_ms: int):
        self.seat_lock_manager = seat_lock_manager
        self.default_ttl_ms = default_ttl_ms

    @Logger.io
    async def execute(self, request: AcquireSeatLockRequest) -> LockResult:
        ttl_ms = request.ttl_ms if request.ttl_ms is not None else self.default_ttl_ms
        result = await anyio.to_thread.run_sync(
            partial(
                self.seat_lock_manager.acquire_lock,
                holder_id=request.holder_id,
                seat_id=request.seat_id,
                ttl_ms=ttl_ms,
            )
        )

        if result.ok:
            Logger.base.info(
                f'🔒 [ACQUIRE-LOCK] {request.holder_id} locked {request.seat_id} for {ttl_ms}ms'
            )
        else:
            Logger.base.info(
                f'⛔ [ACQUIRE-LOCK] {request.holder_id} could not lock {request.seat_id}: '
                f'{result.error_kind}'
            )
        return result
