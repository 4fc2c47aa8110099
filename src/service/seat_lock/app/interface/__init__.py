"""Seat Lock Application Interfaces"""

from src.service.seat_lock.app.interface.i_seat_lock_manager import (
    ISeatLockManager,
    StateChangedCallback,
)
from src.service.seat_lock.app.interface.i_seat_state_broadcaster import ISeatStateBroadcaster
from src.service.seat_lock.app.interface.i_seat_state_store import ISeatStateStore

__all__ = [
    'ISeatLockManager',
    'ISeatStateBroadcaster',
    'ISeatStateStore',
    'StateChangedCallback',
]
