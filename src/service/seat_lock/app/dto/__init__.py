"""Seat Lock Application DTOs"""

from src.service.seat_lock.app.dto.lock_dto import (
    AcquireSeatLockRequest,
    SeatGridRequest,
    SeatLockRequest,
)

__all__ = ['AcquireSeatLockRequest', 'SeatGridRequest', 'SeatLockRequest']
