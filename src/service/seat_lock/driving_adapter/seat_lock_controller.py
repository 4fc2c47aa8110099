"""
Seat Lock Controller
座位鎖定 API 端點，包括即時狀態推送
"""

from typing import Optional

import anyio
from fastapi import APIRouter, Response, status
import orjson
from sse_starlette.sse import EventSourceResponse
import uuid_utils

from src.platform.config.di import container
from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.seat_lock.app.dto import AcquireSeatLockRequest, SeatGridRequest, SeatLockRequest
from src.service.seat_lock.app.interface import ISeatStateBroadcaster
from src.service.seat_lock.domain.lock_result import LockErrorKind, LockResult
from src.service.seat_lock.domain.seat_registry import SeatRegistry
from src.service.seat_lock.driven_adapter.seat_lock_manager_impl import current_time_ms
from src.service.seat_lock.driving_adapter.seat_lock_schema import (
    AcquireLockRequest,
    HolderRequest,
    HolderResponse,
    LockResponse,
    SeatGridBody,
    SeatRegistryResponse,
)


router = APIRouter(prefix='/api/seat', tags=['seat-lock'])

ERROR_STATUS_CODES: dict[LockErrorKind, int] = {
    LockErrorKind.SERVER_NOT_INITIALIZED: status.HTTP_409_CONFLICT,
    LockErrorKind.SEAT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    LockErrorKind.NOT_AVAILABLE: status.HTTP_409_CONFLICT,
    LockErrorKind.CANNOT_CONFIRM: status.HTTP_409_CONFLICT,
    LockErrorKind.CANNOT_RELEASE: status.HTTP_409_CONFLICT,
}


def _to_lock_response(result: LockResult, response: Response) -> LockResponse:
    if result.error_kind:
        response.status_code = ERROR_STATUS_CODES[result.error_kind]
    return LockResponse.from_result(result, now_ms=current_time_ms())


def _registry_payload(registry: SeatRegistry) -> dict:
    return SeatRegistryResponse.from_registry(registry, now_ms=current_time_ms()).model_dump()


@router.post('/holder', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_holder() -> HolderResponse:
    """Issue an opaque holder id for clients that do not bring their own"""
    return HolderResponse(holder_id=str(uuid_utils.uuid7()))


@router.post('/init', status_code=status.HTTP_200_OK)
@Logger.io
async def initialize_seats(body: Optional[SeatGridBody] = None) -> SeatRegistryResponse:
    """
    建立座位網格（已存在時不覆蓋現有狀態）

    Body is optional; the configured SEAT_ROWS x SEAT_COLS grid is used without one.
    """
    settings = container.config_service()
    request = SeatGridRequest(
        rows=body.rows if body else settings.SEAT_ROWS,
        cols=body.cols if body else settings.SEAT_COLS,
    )
    registry = await container.initialize_seat_registry_use_case().execute(request)
    return SeatRegistryResponse.from_registry(registry, now_ms=current_time_ms())


@router.post('/reset', status_code=status.HTTP_200_OK)
@Logger.io
async def reset_seats(body: SeatGridBody) -> SeatRegistryResponse:
    """Drop every lock and booking"""
    registry = await container.reset_seat_registry_use_case().execute(
        SeatGridRequest(rows=body.rows, cols=body.cols)
    )
    return SeatRegistryResponse.from_registry(registry, now_ms=current_time_ms())


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io(truncate_content=True)
async def get_seats() -> SeatRegistryResponse:
    registry = await container.get_seat_snapshot_use_case().execute()
    if registry is None:
        raise ConflictError(LockErrorKind.SERVER_NOT_INITIALIZED.value)
    return SeatRegistryResponse.from_registry(registry, now_ms=current_time_ms())


@router.post('/{seat_id}/lock', status_code=status.HTTP_200_OK)
@Logger.io
async def acquire_seat_lock(
    seat_id: str, body: AcquireLockRequest, response: Response
) -> LockResponse:
    """
    鎖定座位

    Returns 409 with the current seat when it is already locked or booked.
    """
    result = await container.acquire_seat_lock_use_case().execute(
        AcquireSeatLockRequest(holder_id=body.holder_id, seat_id=seat_id, ttl_ms=body.ttl_ms)
    )
    return _to_lock_response(result, response)


@router.post('/{seat_id}/confirm', status_code=status.HTTP_200_OK)
@Logger.io
async def confirm_seat_lock(seat_id: str, body: HolderRequest, response: Response) -> LockResponse:
    result = await container.confirm_seat_lock_use_case().execute(
        SeatLockRequest(holder_id=body.holder_id, seat_id=seat_id)
    )
    return _to_lock_response(result, response)


@router.post('/{seat_id}/release', status_code=status.HTTP_200_OK)
@Logger.io
async def release_seat_lock(seat_id: str, body: HolderRequest, response: Response) -> LockResponse:
    result = await container.release_seat_lock_use_case().execute(
        SeatLockRequest(holder_id=body.holder_id, seat_id=seat_id)
    )
    return _to_lock_response(result, response)


# ============================ SSE Endpoint ============================


@router.get('/sse', status_code=status.HTTP_200_OK)
async def stream_seat_state():
    """
    SSE 即時推送座位狀態（每次狀態變更後推送）

    使用方式：
    ```javascript
    const eventSource = new EventSource('/api/seat/sse');
    eventSource.addEventListener('state', (event) => {
        const data = JSON.parse(event.data);
        console.log('Seats:', data.state.seats);
    });
    ```

    First event is `initial_status` with the current snapshot, then one
    `init` or `state` event per change.
    """
    registry = await container.get_seat_snapshot_use_case().execute()
    if registry is None:
        raise ConflictError(LockErrorKind.SERVER_NOT_INITIALIZED.value)

    broadcaster: ISeatStateBroadcaster = container.seat_state_broadcaster()
    stream = await broadcaster.subscribe()

    async def event_generator():
        try:
            yield {
                'event': 'initial_status',
                'data': orjson.dumps(
                    {'event_type': 'initial_status', 'state': _registry_payload(registry)}
                ).decode(),
            }
            async for event in stream:
                yield {
                    'event': event.event_type.value,
                    'data': orjson.dumps(
                        {
                            'event_type': event.event_type.value,
                            'state': _registry_payload(event.registry),
                        }
                    ).decode(),
                }
        except anyio.get_cancelled_exc_class():
            Logger.base.info('🔌 [SSE] Client disconnected from seat stream')
            raise
        finally:
            with anyio.CancelScope(shield=True):
                await broadcaster.unsubscribe(stream=stream)

    return EventSourceResponse(event_generator())
