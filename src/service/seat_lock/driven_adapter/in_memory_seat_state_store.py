"""In-process seat state store (state lives as long as the process)"""

from typing import Optional

from src.service.seat_lock.app.interface.i_seat_state_store import ISeatStateStore
from src.service.seat_lock.domain.seat_registry import SeatRegistry


class InMemorySeatStateStore(ISeatStateStore):
    def __init__(self) -> None:
        self._registry: Optional[SeatRegistry] = None

    def load(self) -> Optional[SeatRegistry]:
        return self._registry

    def save(self, registry: SeatRegistry) -> None:
        self._registry = registry

    def clear(self) -> None:
        self._registry = None
