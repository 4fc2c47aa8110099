from typing import Dict, Optional

from pydantic import BaseModel, Field

from src.service.seat_lock.domain.lock_result import LockResult
from src.service.seat_lock.domain.seat_entity import Seat
from src.service.seat_lock.domain.seat_registry import MAX_ROWS, SeatRegistry


class HolderRequest(BaseModel):
    holder_id: str = Field(min_length=1)


class AcquireLockRequest(HolderRequest):
    ttl_ms: Optional[int] = Field(default=None, gt=0)


class SeatGridBody(BaseModel):
    rows: int = Field(ge=1, le=MAX_ROWS)
    cols: int = Field(ge=1)


class SeatResponse(BaseModel):
    id: str
    status: str
    locked_by: Optional[str] = None
    lock_expires_at: Optional[int] = None
    lock_remaining_ms: Optional[int] = None
    booked_by: Optional[str] = None

    @classmethod
    def from_seat(cls, seat: Seat, *, now_ms: int) -> 'SeatResponse':
        return cls(
            id=seat.id,
            status=seat.status.value,
            locked_by=seat.locked_by,
            lock_expires_at=seat.lock_expires_at,
            lock_remaining_ms=seat.lock_remaining_ms(now_ms),
            booked_by=seat.booked_by,
        )


class SeatRegistryResponse(BaseModel):
    seats: Dict[str, SeatResponse]
    updated_at: int
    rows: int
    cols: int
    available: int
    locked: int
    booked: int

    @classmethod
    def from_registry(cls, registry: SeatRegistry, *, now_ms: int) -> 'SeatRegistryResponse':
        counts = registry.status_counts()
        return cls(
            seats={
                seat_id: SeatResponse.from_seat(seat, now_ms=now_ms)
                for seat_id, seat in registry.seats.items()
            },
            updated_at=registry.updated_at,
            rows=registry.rows,
            cols=registry.cols,
            **counts,
        )


class LockResponse(BaseModel):
    ok: bool
    error: Optional[str] = None
    seat: Optional[SeatResponse] = None

    @classmethod
    def from_result(cls, result: LockResult, *, now_ms: int) -> 'LockResponse':
        return cls(
            ok=result.ok,
            error=result.error_kind.value if result.error_kind else None,
            seat=SeatResponse.from_seat(result.seat, now_ms=now_ms) if result.seat else None,
        )


class HolderResponse(BaseModel):
    holder_id: str
