"""Seat Lock Domain"""

from src.service.seat_lock.domain.lock_result import (
    LockErrorKind,
    LockResult,
    SeatStateEvent,
    SeatStateEventType,
)
from src.service.seat_lock.domain.seat_entity import Seat, SeatStatus
from src.service.seat_lock.domain.seat_registry import SeatRegistry, build_seat_id

__all__ = [
    'LockErrorKind',
    'LockResult',
    'Seat',
    'SeatRegistry',
    'SeatStateEvent',
    'SeatStateEventType',
    'SeatStatus',
    'build_seat_id',
]
