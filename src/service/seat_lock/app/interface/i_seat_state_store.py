"""
Seat State Store Interface

座位狀態儲存接口 - 整份座位登記表的讀寫
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.service.seat_lock.domain.seat_registry import SeatRegistry


class ISeatStateStore(ABC):
    """
    Whole-document storage for the seat registry

    Callers hold the lock manager's critical section around load/save,
    so implementations need no locking of their own.
    """

    @abstractmethod
    def load(self) -> Optional[SeatRegistry]:
        """
        Returns:
            The stored registry, or None when nothing has been initialized

        Raises:
            SeatStateCorruptedError: stored content exists but cannot be decoded
        """
        pass

    @abstractmethod
    def save(self, registry: SeatRegistry) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass
