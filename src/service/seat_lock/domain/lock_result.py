"""Lock operation outcomes and state change events"""

from enum import StrEnum
from typing import Optional

import attrs

from src.service.seat_lock.domain.seat_entity import Seat
from src.service.seat_lock.domain.seat_registry import SeatRegistry


class LockErrorKind(StrEnum):
    """Expected, recoverable lock outcomes (returned, never raised)"""

    SERVER_NOT_INITIALIZED = 'server_not_init'
    SEAT_NOT_FOUND = 'seat_not_found'
    NOT_AVAILABLE = 'not_available'
    CANNOT_CONFIRM = 'cannot_confirm'
    CANNOT_RELEASE = 'cannot_release'


@attrs.define(frozen=True)
class LockResult:
    ok: bool
    seat: Optional[Seat] = None  # Copy of the seat, never the live entity
    error_kind: Optional[LockErrorKind] = None

    @classmethod
    def success(cls, seat: Optional[Seat] = None) -> 'LockResult':
        return cls(ok=True, seat=seat)

    @classmethod
    def failure(cls, error_kind: LockErrorKind, seat: Optional[Seat] = None) -> 'LockResult':
        return cls(ok=False, seat=seat, error_kind=error_kind)


class SeatStateEventType(StrEnum):
    INIT = 'init'
    STATE = 'state'


@attrs.define(frozen=True)
class SeatStateEvent:
    event_type: SeatStateEventType
    registry: SeatRegistry  # Snapshot taken right after the mutation
