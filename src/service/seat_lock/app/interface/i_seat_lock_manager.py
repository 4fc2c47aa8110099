"""
Seat Lock Manager Interface

座位鎖管理器接口 - 租約式鎖定狀態機
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from src.service.seat_lock.domain.lock_result import LockResult, SeatStateEvent
from src.service.seat_lock.domain.seat_registry import SeatRegistry


StateChangedCallback = Callable[[SeatStateEvent], None]


class ISeatLockManager(ABC):
    """
    Seat lock manager

    Every operation sweeps expired locks first and runs atomically with
    respect to every other operation. No operation waits for a seat.
    """

    @abstractmethod
    def initialize(self, *, rows: int, cols: int) -> SeatRegistry:
        """
        Create the registry with every seat available

        No-op when a registry already exists; returns a snapshot either way.
        """
        pass

    @abstractmethod
    def reset(self, *, rows: int, cols: int) -> SeatRegistry:
        """Discard the live registry and create a fresh one"""
        pass

    @abstractmethod
    def acquire_lock(self, *, holder_id: str, seat_id: str, ttl_ms: int) -> LockResult:
        """available -> locked (compare-and-set), otherwise not_available"""
        pass

    @abstractmethod
    def confirm_lock(self, *, holder_id: str, seat_id: str) -> LockResult:
        """locked by holder -> booked, otherwise cannot_confirm"""
        pass

    @abstractmethod
    def release_lock(self, *, holder_id: str, seat_id: str) -> LockResult:
        """locked by holder -> available, otherwise cannot_release"""
        pass

    @abstractmethod
    def get_snapshot(self) -> Optional[SeatRegistry]:
        """Deep copy of the swept registry, or None when not initialized"""
        pass

    @abstractmethod
    def on_state_changed(self, callback: StateChangedCallback) -> Callable[[], None]:
        """
        Register a listener fired after every successful mutation

        Returns:
            Callable that unregisters the listener
        """
        pass
